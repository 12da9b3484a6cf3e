"""
Tests for the management CLI against the configured (in-memory) database.
"""

import pytest
from click.testing import CliRunner

from petstore.db.session import dispose_engine
from petstore.manage import DEMO_CUSTOMER, DEMO_PETS, cli
from petstore.repositories.unit_of_work import sqlalchemy_uow_factory


@pytest.fixture
def runner():
    dispose_engine()
    yield CliRunner()
    dispose_engine()


@pytest.mark.integration
class TestManageCommands:
    def test_seed_is_repeatable(self, runner):
        first = runner.invoke(cli, ["seed"])
        second = runner.invoke(cli, ["seed"])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        with sqlalchemy_uow_factory()() as uow:
            assert len(uow.pets.list_all()) == len(DEMO_PETS)
            assert [c.name for c in uow.customers.list_all()] == [DEMO_CUSTOMER[0]]

    def test_stuck_reservations_empty(self, runner):
        assert runner.invoke(cli, ["create_tables"]).exit_code == 0

        result = runner.invoke(cli, ["stuck_reservations", "--release"])

        assert result.exit_code == 0, result.output

    def test_stuck_reservations_rejects_negative_grace(self, runner):
        result = runner.invoke(cli, ["stuck_reservations", "--grace-seconds", "-1"])

        assert result.exit_code != 0

    def test_stuck_reservations_with_grace_override(self, runner):
        assert runner.invoke(cli, ["create_tables"]).exit_code == 0

        result = runner.invoke(
            cli, ["stuck_reservations", "--release", "--grace-seconds", "0"]
        )

        assert result.exit_code == 0, result.output
