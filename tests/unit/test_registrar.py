"""
Unit tests for Registrar.

Tests one host mutation per register call, ledger bookkeeping, and the
wrapping of host failures into RegistrationError / UnregistrationWarning.
"""

from unittest.mock import MagicMock

import pytest

from hibernia.core.discovery import PackageUnitSource
from hibernia.core.exceptions import RegistrationError, UnregistrationWarning
from hibernia.core.interfaces.host import IHost
from hibernia.core.models.capability import CapabilityKind
from hibernia.core.models.lifecycle import RegistrationLedger
from hibernia.core.registrar import Registrar
from hibernia.core.resolver import DependencyResolver
from hibernia.core.scanner import Scanner

OPEN_ACCOUNT = "sample_plugins.economy.listeners.OpenAccount:PlayerJoinEvent"


@pytest.fixture
def instances(container):
    scan = Scanner().scan(PackageUnitSource("sample_plugins.economy"))
    return DependencyResolver(container).resolve_all(scan.descriptors).instances


@pytest.fixture
def mock_host():
    host = MagicMock(spec=IHost)
    host.register_command.return_value = "cmd-token"
    host.register_listener.return_value = "listener-token"
    host.register_config_schema.return_value = "config-token"
    return host


class TestRegister:
    """Tests for Registrar.register()."""

    def test_each_kind_goes_to_its_registry(self, instances, mock_host):
        registrar = Registrar(mock_host)
        ledger = RegistrationLedger()

        handles = [registrar.register(i, ledger) for i in registrar.order(instances)]

        assert mock_host.register_config_schema.call_count == 1
        assert mock_host.register_listener.call_count == 2
        assert mock_host.register_command.call_count == 2
        assert [h.token for h in handles] == [
            "config-token",
            "listener-token",
            "listener-token",
            "cmd-token",
            "cmd-token",
        ]
        assert list(ledger) == handles

    def test_handle_identifies_capability(self, instances, mock_host):
        balance = next(i for i in instances if i.identity == "balance")

        handle = Registrar(mock_host).register(balance, RegistrationLedger())

        assert handle.kind == CapabilityKind.COMMAND
        assert handle.identity == "balance"
        mock_host.register_command.assert_called_once_with(balance)

    def test_handle_ids_are_unique(self, instances, mock_host):
        registrar = Registrar(mock_host)
        ledger = RegistrationLedger()
        for instance in instances:
            registrar.register(instance, ledger)

        assert len({h.handle_id for h in ledger}) == len(instances)

    def test_host_refusal_becomes_registration_error(self, instances, mock_host):
        mock_host.register_command.side_effect = RuntimeError("label taken")
        balance = next(i for i in instances if i.identity == "balance")
        ledger = RegistrationLedger()

        with pytest.raises(RegistrationError) as exc_info:
            Registrar(mock_host).register(balance, ledger)

        assert exc_info.value.message == "Host rejected command 'balance': label taken"
        assert exc_info.value.identity == "balance"
        assert len(ledger) == 0

    def test_order_is_kind_then_discovery(self, instances):
        ordered = Registrar.order(reversed(instances))
        assert [i.identity for i in ordered] == [
            "economy",
            OPEN_ACCOUNT,
            "chat-audit",
            "balance",
            "pay",
        ]


class TestUnregister:
    """Tests for Registrar.unregister()."""

    def test_token_is_handed_back(self, instances, mock_host):
        registrar = Registrar(mock_host)
        schema = next(i for i in instances if i.kind == CapabilityKind.CONFIG_SCHEMA)
        handle = registrar.register(schema, RegistrationLedger())

        registrar.unregister(handle)

        mock_host.unregister_config_schema.assert_called_once_with("config-token")

    def test_failure_becomes_warning(self, instances, mock_host):
        mock_host.unregister_listener.side_effect = RuntimeError("bus closed")
        registrar = Registrar(mock_host)
        listener = next(i for i in instances if i.kind == CapabilityKind.LISTENER)
        handle = registrar.register(listener, RegistrationLedger())

        with pytest.raises(UnregistrationWarning) as exc_info:
            registrar.unregister(handle)

        assert "bus closed" in exc_info.value.message
        assert exc_info.value.kind == "listener"


class TestLedger:
    """Tests for RegistrationLedger."""

    def test_drain_is_newest_first_and_empties(self, instances, mock_host):
        registrar = Registrar(mock_host)
        ledger = RegistrationLedger()
        for instance in registrar.order(instances):
            registrar.register(instance, ledger)

        drained = [h.identity for h in ledger.drain()]

        assert drained == ["pay", "balance", "chat-audit", OPEN_ACCOUNT, "economy"]
        assert len(ledger) == 0
