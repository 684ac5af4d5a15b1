"""Tests for AccountDatabase - SQL issued against a mocked PostgresClient."""

from datetime import timedelta
from unittest.mock import Mock
from uuid import uuid4

import psycopg2.errors
import pytest

from auth.database import AccountDatabase
from auth.exceptions import AccountExistsError
from auth.types import Account
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc


def _row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(),
        "email": "owner@example.com",
        "name": "Owner",
        "country": "US",
        "verification_code": "123456",
        "verification_code_expires": now + timedelta(minutes=10),
        "email_verified": False,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


@pytest.fixture
def account_database(postgres):
    return AccountDatabase(postgres)


class TestLookups:

    def test_by_email_returns_account(self, account_database, postgres):
        postgres.execute_single.return_value = _row()

        account = account_database.get_account_by_email("owner@example.com")

        assert isinstance(account, Account)
        assert account.email == "owner@example.com"
        query, params = postgres.execute_single.call_args.args
        assert "WHERE email = %s" in query
        assert params == ("owner@example.com",)

    def test_by_email_missing(self, account_database, postgres):
        postgres.execute_single.return_value = None
        assert account_database.get_account_by_email("nobody@example.com") is None

    def test_by_id(self, account_database, postgres):
        row = _row()
        postgres.execute_single.return_value = row

        assert account_database.get_account_by_id(row["id"]).id == row["id"]


class TestCreateAccount:

    def test_inserts_unverified_account(self, account_database, postgres):
        expires = now_utc() + timedelta(minutes=10)
        postgres.execute_returning.return_value = [_row(verification_code="654321")]

        account = account_database.create_account("owner@example.com", "Owner", "US", "654321", expires)

        assert account.verification_code == "654321"
        query, params = postgres.execute_returning.call_args.args
        assert "INSERT INTO users" in query
        assert params[:5] == ("owner@example.com", "Owner", "US", "654321", expires)

    def test_duplicate_email_raises_conflict(self, account_database, postgres):
        postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation()

        with pytest.raises(AccountExistsError):
            account_database.create_account("owner@example.com", "Owner", "US", "1", now_utc())


class TestCodes:

    def test_store_code_reports_update(self, account_database, postgres):
        postgres.execute_returning.return_value = [{"id": uuid4()}]
        assert account_database.store_verification_code("owner@example.com", "111111", now_utc()) is True

    def test_store_code_unknown_email(self, account_database, postgres):
        postgres.execute_returning.return_value = []
        assert account_database.store_verification_code("x@example.com", "111111", now_utc()) is False

    def test_mark_verified_clears_code(self, account_database, postgres):
        row = _row(email_verified=True, verification_code=None, verification_code_expires=None)
        postgres.execute_returning.return_value = [row]

        account = account_database.mark_email_verified(row["id"])

        assert account.email_verified is True
        assert account.verification_code is None
        query = postgres.execute_returning.call_args.args[0]
        assert "verification_code = NULL" in query
        assert "verification_code_expires = NULL" in query

    def test_mark_verified_missing_account(self, account_database, postgres):
        postgres.execute_returning.return_value = []
        assert account_database.mark_email_verified(uuid4()) is None
