"""
Unit tests for companies.

Covers the company record, the listing endpoints with their differing
cursor shapes, batch updates and contact associations.
"""
import pytest

from hubspot_api.core.errors import InvalidParams, PageLimitExceeded
from hubspot_api.resources.company import (
    ByObjectId,
    ByVid,
    Company,
    CompanyClient,
    CompanyUpdate,
)
from hubspot_api.resources.contact import Contact, ContactClient


def company_payload(company_id, name=None, **properties):
    props = dict(properties)
    if name:
        props["name"] = name
    return {
        "portalId": 62515,
        "companyId": company_id,
        "isDeleted": False,
        "properties": {
            key: {"value": value, "timestamp": 1457513066540, "source": "API"}
            for key, value in props.items()
        },
    }


@pytest.fixture
def companies(connection):
    return CompanyClient(connection)


class TestCompanyRecord:
    """Tests for the Company record."""

    def test_fields(self, companies):
        company = companies.from_result(company_payload(10, "Acme", domain="acme.com"))

        assert company.id == 10
        assert company.vid == 10
        assert company.name == "Acme"
        assert company["domain"] == "acme.com"
        assert repr(company) == "<Company companyId=10>"

    def test_shares_connection_with_contacts(self, connection):
        client = CompanyClient(connection)

        assert isinstance(client.contact_client, ContactClient)
        assert client.contact_client.connection is connection


class TestCompanyListing:
    """Tests for the paged company endpoints."""

    def test_all(self, api, companies):
        api.add("GET", "/companies/v2/companies/paged", json={
            "companies": [company_payload(1, "A"), company_payload(2, "B")],
            "has-more": True,
            "offset": 2,
        })
        api.add("GET", "/companies/v2/companies/paged", json={
            "companies": [company_payload(3, "C")],
            "has-more": False,
            "offset": 3,
        })

        result = companies.all({"properties": ["name"]}, limit=2).all()

        assert [company.name for company in result] == ["A", "B", "C"]
        assert api.params(0) == {"properties": "name", "limit": "2", "hapikey": "demo"}
        assert api.params(1)["offset"] == "2"

    def test_all_allows_larger_pages(self, api, companies):
        api.add("GET", "/companies/v2/companies/paged", json={
            "companies": [], "has-more": False, "offset": 0,
        })

        collection = companies.all(limit=500)
        collection.all()

        assert collection.limit == 250
        assert api.params()["limit"] == "250"

    def test_all_max_pages(self, api, companies):
        api.add("GET", "/companies/v2/companies/paged", json={
            "companies": [company_payload(1)], "has-more": True, "offset": 1,
        })

        collection = companies.all(limit=1, max_pages=1)
        seen = []

        with pytest.raises(PageLimitExceeded) as exc_info:
            for company in collection:
                seen.append(company.id)

        assert seen == [1]
        assert exc_info.value.next_offset == 1

    def test_search_domain_nested_offset(self, api, companies):
        api.add("POST", "/companies/v2/domains/acme.com/companies", json={
            "results": [company_payload(1, "Acme")],
            "hasMore": True,
            "offset": {"isPrimary": True, "companyId": 1},
        })
        api.add("POST", "/companies/v2/domains/acme.com/companies", json={
            "results": [company_payload(2, "Acme EU")],
            "hasMore": False,
            "offset": {"isPrimary": True, "companyId": 2},
        })

        result = companies.search_domain("acme.com", {"properties": ["domain"]}, limit=1).all()

        assert [company.id for company in result] == [1, 2]
        assert api.body(0) == {
            "limit": 1,
            "requestOptions": {"properties": ["domain"]},
            "offset": {"isPrimary": True, "companyId": None},
        }
        assert api.body(1)["offset"] == {"isPrimary": True, "companyId": 1}
        assert api.params(0) == {"hapikey": "demo"}

    def test_search_domain_requires_domain(self, companies):
        with pytest.raises(InvalidParams):
            companies.search_domain("")

    @pytest.mark.parametrize("method, path", [
        ("recently_created", "/companies/v2/companies/recent/created"),
        ("recently_modified", "/companies/v2/companies/recent/modified"),
    ])
    def test_recent(self, api, companies, method, path):
        api.add("GET", path, json={
            "results": [company_payload(5, "New")],
            "hasMore": True,
            "offset": 1,
            "total": 2,
        })
        api.add("GET", path, json={
            "results": [company_payload(6, "Newer")],
            "hasMore": False,
            "offset": 2,
            "total": 2,
        })

        result = getattr(companies, method)(limit=1).all()

        assert [company.id for company in result] == [5, 6]
        assert api.params(0) == {"count": "1", "hapikey": "demo"}
        assert api.params(1) == {"offset": "1", "count": "1", "hapikey": "demo"}


class TestCompanyWrites:
    """Tests for create, update and delete."""

    def test_create(self, api, companies):
        api.add("POST", "/companies/v2/companies/", json=company_payload(20, "Acme"))

        company = companies.create({"name": "Acme", "domain": "acme.com"})

        assert company.id == 20
        assert api.body() == {"properties": [
            {"name": "name", "value": "Acme"},
            {"name": "domain", "value": "acme.com"},
        ]}

    def test_update_returns_stored_company(self, api, companies):
        api.add("PUT", "/companies/v2/companies/20",
                json=company_payload(20, "Acme Inc", domain="acme.com"))

        company = companies.update(20, {"name": "Acme Inc"})

        assert isinstance(company, Company)
        assert company.name == "Acme Inc"
        assert api.last.method == "PUT"

    def test_record_update(self, api, companies):
        api.add("PUT", "/companies/v2/companies/20", json=company_payload(20, "Renamed"))
        company = companies.from_result(company_payload(20, "Acme", domain="acme.com"))

        company.update({"name": "Renamed"})

        assert company.properties == {"name": "Renamed", "domain": "acme.com"}

    def test_destroy(self, api, companies):
        api.add("DELETE", "/companies/v2/companies/20", json={"companyId": 20, "deleted": True})
        company = companies.from_result(company_payload(20))

        assert company.destroy() is True
        with pytest.raises(InvalidParams, match="destroyed"):
            company.add_contact(1)


class TestBatchUpdate:
    """Tests for asynchronous batch updates."""

    def test_mixed_identifiers(self, api, companies):
        api.add("POST", "/companies/v1/batch-async/update", status=202)

        result = companies.batch_update([
            {"objectId": 1, "name": "A"},
            {"vid": 2, "name": "B", "domain": "b.com"},
            CompanyUpdate(ByObjectId(3), {"name": "C"}),
        ])

        assert result is None
        assert api.body() == [
            {"objectId": 1, "properties": [{"name": "name", "value": "A"}]},
            {"objectId": 2, "properties": [
                {"name": "name", "value": "B"},
                {"name": "domain", "value": "b.com"},
            ]},
            {"objectId": 3, "properties": [{"name": "name", "value": "C"}]},
        ]

    def test_from_mapping_strips_identifier(self):
        update = CompanyUpdate.from_mapping({"vid": 7, "name": "A"})

        assert update.identifier == ByVid(7)
        assert update.object_id == 7
        assert update.properties == {"name": "A"}

    def test_missing_identifier(self, api, companies):
        with pytest.raises(InvalidParams, match="vid or objectId"):
            companies.batch_update([{"name": "A"}])

        assert api.requests == []

    def test_ambiguous_identifier(self, companies):
        with pytest.raises(InvalidParams, match="Ambiguous"):
            companies.batch_update([{"vid": 1, "objectId": 2, "name": "A"}])

    def test_empty_batch(self, companies):
        with pytest.raises(InvalidParams):
            companies.batch_update([])

    def test_oversized_batch(self, api, companies):
        updates = [{"objectId": i, "name": str(i)} for i in range(101)]

        with pytest.raises(InvalidParams, match="at most 100"):
            companies.batch_update(updates)

        assert api.requests == []


class TestCompanyContacts:
    """Tests for company/contact associations."""

    def test_add_contact_by_vid(self, api, companies):
        api.add("PUT", "/companies/v2/companies/10/contacts/61574", status=200)

        assert companies.add_contact(10, 61574) is True
        assert api.last.content == b""

    def test_record_add_and_remove_contact(self, api, companies):
        api.add("PUT", "/companies/v2/companies/10/contacts/5", status=200)
        api.add("DELETE", "/companies/v2/companies/10/contacts/5", status=204)
        company = companies.from_result(company_payload(10))
        contact = Contact({"vid": 5})

        assert company.add_contact(contact) is company
        assert company.remove_contact("5") is company
        assert [request.method for request in api.requests] == ["PUT", "DELETE"]

    def test_add_contact_rejects_bad_reference(self, api, companies):
        with pytest.raises(InvalidParams):
            companies.add_contact(10, "someone@example.com")

        assert api.requests == []

    def test_contact_ids(self, api, companies):
        api.add("GET", "/companies/v2/companies/10/vids", json={
            "vids": [1, 2], "hasMore": True, "vidOffset": 2,
        })
        api.add("GET", "/companies/v2/companies/10/vids", json={
            "vids": [3], "hasMore": False, "vidOffset": 3,
        })
        company = companies.from_result(company_payload(10))

        assert company.contact_ids(limit=2).all() == [1, 2, 3]
        assert api.params(0) == {"count": "2", "hapikey": "demo"}
        assert api.params(1) == {"vidOffset": "2", "count": "2", "hapikey": "demo"}

    def test_contacts_built_from_listing(self, api, companies):
        api.add("GET", "/companies/v2/companies/10/contacts", json={
            "contacts": [
                {
                    "vid": 1,
                    "identities": [],
                    "properties": [
                        {"name": "email", "value": "a@acme.com"},
                        {"name": "firstname", "value": "Ann"},
                    ],
                },
                {"vid": 2, "properties": [{"name": "email", "value": "b@acme.com"}]},
            ],
            "hasMore": False,
            "vidOffset": 2,
        })

        contacts = companies.contacts(10).all()

        assert [contact.email for contact in contacts] == ["a@acme.com", "b@acme.com"]
        assert all(isinstance(contact, Contact) for contact in contacts)
        assert contacts[0].name == "Ann"
        assert len(api.requests) == 1

    def test_contacts_bound_to_contact_client(self, api, companies):
        api.add("GET", "/companies/v2/companies/10/contacts", json={
            "contacts": [{"vid": 1, "properties": []}], "hasMore": False,
        })
        api.add("DELETE", "/contacts/v1/contact/vid/1", json={"deleted": True})

        contact = companies.contacts(10).first()

        assert contact.destroy() is True
        assert api.last.url.path == "/contacts/v1/contact/vid/1"

    def test_close_keeps_contact_client_connection(self, connection):
        client = CompanyClient(connection)

        client.close()

        assert not client.contact_client.connection.client.is_closed
