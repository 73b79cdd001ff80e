import pytest

from app.exceptions import InvalidTransitionError, NotFoundError
from app.models.domains import Domain
from app.services.domain_service import (
    CSVValidationError,
    clean_domain,
    domain_service,
    is_valid_domain,
)


@pytest.mark.parametrize("raw,expected", [
    ("Example.COM", "example.com"),
    ("https://www.example.com/about/team", "example.com"),
    ("http://shop.example.co.uk:8080/", "shop.example.co.uk"),
    ("  widgets.io  ", "widgets.io"),
    ("", ""),
])
def test_clean_domain(raw, expected):
    assert clean_domain(raw) == expected


@pytest.mark.parametrize("domain,valid", [
    ("example.com", True),
    ("sub-domain.example.io", True),
    ("localhost", False),
    ("not a domain", False),
    ("-example.com", False),
    ("example.c", False),
    ("", False),
])
def test_is_valid_domain(domain, valid):
    assert is_valid_domain(domain) is valid


def test_ingest_csv_stats_and_results(db, add_domain):
    add_domain("already.com", status="completed")
    content = (
        b"Domain,Name\n"
        b"https://www.Example.com/about,Example\n"
        b"example.com,Example again\n"
        b"not a domain,Broken\n"
        b",Missing\n"
        b"already.com,Old\n"
        b"widgets.io,Widgets\n"
    )

    stats, results = domain_service.ingest_csv(db, content, user_query="  what does this company sell ")

    assert stats.total_rows == 6
    assert stats.inserted == 2
    assert stats.duplicates == 2
    assert stats.invalid == 2
    assert [r.status for r in results] == ["success", "duplicate", "error", "error", "duplicate", "success"]
    assert results[1].error_reason == "Duplicate within file"
    assert results[4].error_reason == "Already in database"

    stored = {d.domain: d for d in db.query(Domain).all()}
    assert stored["example.com"].status == "created"
    assert stored["example.com"].user_query == "what does this company sell"
    assert stored["widgets.io"].user_query == "what does this company sell"


def test_ingest_csv_requires_domain_column(db):
    with pytest.raises(CSVValidationError):
        domain_service.ingest_csv(db, b"website\nexample.com\n")


def test_ingest_csv_rejects_duplicate_domain_columns(db):
    with pytest.raises(CSVValidationError) as exc_info:
        domain_service.ingest_csv(db, b"Domain,domain \na.com,b.com\n")
    assert "duplicate" in str(exc_info.value)


def test_ingest_csv_rejects_empty_file(db):
    with pytest.raises(CSVValidationError):
        domain_service.ingest_csv(db, b"   \n")


def test_run_agent_only_from_created(db, add_domain, load_domain):
    created = add_domain("new.com", status="created")
    failed = add_domain("failed.com", status="error", error_message="boom")

    domain_service.run_agent(db, created)
    assert load_domain(created).status == "queued"

    with pytest.raises(InvalidTransitionError):
        domain_service.run_agent(db, failed)


@pytest.mark.parametrize("status", ["running", "error"])
def test_restart_from_running_or_error(db, add_domain, load_domain, status):
    domain_id = add_domain("example.com", status=status, error_message="boom" if status == "error" else None)

    domain_service.restart(db, domain_id)

    domain = load_domain(domain_id)
    assert domain.status == "queued"
    assert domain.error_message is None


@pytest.mark.parametrize("status", ["created", "queued", "completed"])
def test_restart_rejected_for_other_states(db, add_domain, status):
    domain_id = add_domain("example.com", status=status)

    with pytest.raises(InvalidTransitionError):
        domain_service.restart(db, domain_id)


def test_restart_unknown_domain(db):
    with pytest.raises(NotFoundError):
        domain_service.restart(db, 404)
