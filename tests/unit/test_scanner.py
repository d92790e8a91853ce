"""
Unit tests for capability markers and the Scanner.

Tests cover:
- Markers record declarations without validating them
- Descriptor extraction from the sample economy plugin
- Aggregated scan errors (duplicates, import failures, bad declarations)
- Restartable, deterministic discovery
"""

from pydantic import BaseModel

from hibernia.core.discovery import ObjectUnitSource, PackageUnitSource
from hibernia.core.interfaces.config import IConfigSource
from hibernia.core.markers import command, config_schema, listener, markers_of
from hibernia.core.models.capability import CapabilityKind, EventPriority
from hibernia.core.scanner import Scanner
from hibernia.presenters.report import describe
from sample_plugins.economy.commands import BalanceCommand
from sample_plugins.economy.events import PlayerJoinEvent
from sample_plugins.economy.services import Bank
from sample_plugins.economy.settings import EconomySettings

OPEN_ACCOUNT = "sample_plugins.economy.listeners.OpenAccount:PlayerJoinEvent"


def scan_objects(*objects):
    return Scanner().scan(ObjectUnitSource("inline", objects))


class TestMarkers:
    """Tests for the marker decorators."""

    def test_decorator_does_not_validate(self):
        """An empty command name is recorded, not rejected."""

        @command("")
        def nameless(invoker, arguments):
            pass

        (marker,) = markers_of(nameless)
        assert marker.kind == CapabilityKind.COMMAND
        assert marker.identity == ""

    def test_markers_are_not_inherited(self):
        """A subclass of a marked class declares nothing by itself."""

        class Child(BalanceCommand):
            pass

        assert len(markers_of(BalanceCommand)) == 1
        assert markers_of(Child) == ()

    def test_stacked_markers(self):
        """One class may declare several capabilities."""

        @command("greet")
        @listener(PlayerJoinEvent)
        class Greeter:
            def handle(self, event):
                pass

            def execute(self, invoker, arguments):
                pass

        kinds = [m.kind for m in markers_of(Greeter)]
        assert kinds == [CapabilityKind.LISTENER, CapabilityKind.COMMAND]

    def test_unmarked_object(self):
        assert markers_of(Bank) == ()
        assert markers_of(42) == ()


class TestScannerEconomyPlugin:
    """Tests scanning the well-formed sample plugin."""

    def test_scan_finds_every_capability_in_discovery_order(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))

        assert result.ok, result.errors
        assert [d.identity for d in result.descriptors] == [
            "balance",
            "pay",
            OPEN_ACCOUNT,
            "chat-audit",
            "economy",
        ]
        assert [d.order for d in result.descriptors] == [0, 1, 2, 3, 4]

    def test_command_metadata(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))
        balance = next(d for d in result.of_kind(CapabilityKind.COMMAND) if d.identity == "balance")

        assert balance.metadata.labels == ("balance", "bal", "money")
        assert balance.metadata.permission == "economy.balance"
        assert balance.source_unit == "sample_plugins.economy.commands:BalanceCommand"
        assert [(d.key, d.name) for d in balance.dependencies] == [
            (Bank, "bank"),
            (EconomySettings, "settings"),
        ]

    def test_function_dependencies_are_keyword_only_parameters(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))
        pay = next(d for d in result.descriptors if d.identity == "pay")

        assert [(d.key, d.name) for d in pay.dependencies] == [(Bank, "bank")]
        assert pay.metadata.description == "Send money to another player"

    def test_listener_metadata(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))
        listeners = {d.identity: d for d in result.of_kind(CapabilityKind.LISTENER)}

        join = listeners[OPEN_ACCOUNT]
        assert join.metadata.event is PlayerJoinEvent
        assert join.metadata.priority == EventPriority.HIGH
        assert listeners["chat-audit"].metadata.ignore_cancelled is True

    def test_config_schema_metadata(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))
        (schema,) = result.of_kind(CapabilityKind.CONFIG_SCHEMA)

        assert schema.metadata.section == "economy"
        assert schema.metadata.backing_type is EconomySettings
        assert schema.metadata.defaults == {"starting_balance": 100, "currency": "coins"}
        assert [d.key for d in schema.dependencies] == [IConfigSource]

    def test_rescan_is_deterministic(self):
        """The lazy sequence can be restarted and yields the same descriptors."""
        scanner = Scanner()
        source = PackageUnitSource("sample_plugins.economy")

        first = [(d.kind, d.identity) for d in scanner.declarations(source)]
        second = [(d.kind, d.identity) for d in scanner.declarations(source)]

        assert first == second
        assert len(first) == 5


class TestScannerErrors:
    """Tests that declaration defects are collected, never raised."""

    def test_broken_plugin_reports_every_error(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.broken"))
        messages = [e.message for e in result.errors]

        assert len(result.errors) == 4
        assert "Duplicate command identity 'reload'" in messages
        assert any("sample_plugins.broken.missing_import" in m for m in messages)
        assert any("fields without a default: max_homes" in m for m in messages)
        assert any("must define execute(self, invoker, arguments)" in m for m in messages)

    def test_duplicate_keeps_first_declaration(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.broken"))
        (reload,) = result.of_kind(CapabilityKind.COMMAND)

        assert reload.identity == "reload"
        assert reload.target.__name__ == "reload_config"
        duplicate = next(e for e in result.errors if e.message.startswith("Duplicate"))
        assert duplicate.identity == "reload"
        assert duplicate.kind == "command"

    def test_import_failure_names_the_unit(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.broken"))
        failure = next(e for e in result.errors if "Failed to load" in e.message)

        assert failure.source_unit == "sample_plugins.broken.missing_import"
        assert failure.identity is None
        assert isinstance(failure.__cause__, ImportError)

    def test_same_identity_in_different_kinds_is_allowed(self):
        @command("economy")
        def economy_command(invoker, arguments):
            pass

        result = scan_objects(EconomySettings, economy_command)

        assert result.ok
        assert len(result.descriptors) == 2

    def test_unannotated_constructor_parameter(self):
        @command("home")
        class HomeCommand:
            def __init__(self, store):
                self.store = store

            def execute(self, invoker, arguments):
                pass

        result = scan_objects(HomeCommand)

        assert not result.ok
        assert "'store'" in result.errors[0].message
        assert "no type annotation" in result.errors[0].message
        assert result.errors[0].identity == "home"

    def test_requires_overrides_inferred_dependencies(self):
        @command("home", requires=(Bank,))
        class HomeCommand:
            def __init__(self, store):
                self.store = store

            def execute(self, invoker, arguments):
                pass

        result = scan_objects(HomeCommand)

        assert result.ok
        (dep,) = result.descriptors[0].dependencies
        assert dep.key is Bank
        assert dep.name is None

    def test_command_function_arity(self):
        @command("spawn")
        def spawn(invoker):
            pass

        result = scan_objects(spawn)
        assert "must accept (invoker, arguments)" in result.errors[0].message

    def test_command_name_rules(self):
        @command("Warp Home")
        def warp(invoker, arguments):
            pass

        @command("  TPA ")
        def tpa(invoker, arguments):
            pass

        result = scan_objects(warp, tpa)

        assert len(result.errors) == 1
        assert "whitespace" in result.errors[0].message
        assert [d.identity for d in result.descriptors] == ["tpa"]

    def test_alias_collision_between_commands(self):
        @command("home", aliases=("h",))
        def home(invoker, arguments):
            pass

        @command("help", aliases=("h", "?"))
        def help_command(invoker, arguments):
            pass

        result = scan_objects(home, help_command)

        assert [d.identity for d in result.descriptors] == ["home"]
        assert result.errors[0].message == (
            "Command label 'h' of 'help' is already used by command 'home'"
        )

    def test_listener_event_must_be_a_class(self):
        @listener("PlayerJoinEvent")
        def on_join(event):
            pass

        result = scan_objects(on_join)
        assert "event type must be a class" in result.errors[0].message

    def test_listener_priority_by_name_and_value(self):
        @listener(PlayerJoinEvent, priority="monitor", identity="log-joins")
        def log_joins(event):
            pass

        @listener(PlayerJoinEvent, priority=0, identity="first")
        def first(event):
            pass

        @listener(PlayerJoinEvent, priority="urgent", identity="bad")
        def bad(event):
            pass

        result = scan_objects(log_joins, first, bad)

        priorities = {d.identity: d.metadata.priority for d in result.descriptors}
        assert priorities == {"log-joins": EventPriority.MONITOR, "first": EventPriority.LOWEST}
        assert result.errors[0].identity == "bad"

    def test_listener_class_needs_handle(self):
        @listener(PlayerJoinEvent)
        class NoHandle:
            def on_event(self, event):
                pass

        result = scan_objects(NoHandle)
        assert "must define handle(self, event)" in result.errors[0].message

    def test_config_schema_must_be_pydantic_model(self):
        @config_schema("homes")
        class Homes:
            limit = 3

        result = scan_objects(Homes)
        assert "pydantic BaseModel" in result.errors[0].message

    def test_config_schema_explicit_section(self):
        @config_schema("homes", section="features.homes")
        class Homes(BaseModel):
            limit: int = 3

        result = scan_objects(Homes)
        assert result.descriptors[0].metadata.section == "features.homes"

    def test_errors_do_not_stop_the_pass(self):
        """Valid declarations after a defect are still described."""

        @command("")
        def nameless(invoker, arguments):
            pass

        @command("ok")
        def ok(invoker, arguments):
            pass

        result = scan_objects(nameless, ok)

        assert len(result.errors) == 1
        assert [d.identity for d in result.descriptors] == ["ok"]

    def test_invalid_declaration_still_claims_its_identity(self):
        @command("warp")
        class WarpCommand:
            def teleport(self, invoker, arguments):
                pass

        @command("warp")
        def warp(invoker, arguments):
            pass

        result = scan_objects(WarpCommand, warp)
        messages = [e.message for e in result.errors]

        assert result.descriptors == []
        assert len(messages) == 2
        assert "must define execute(self, invoker, arguments)" in messages[0]
        assert messages[1] == "Duplicate command identity 'warp'"


class TestListenerIdentity:
    """Tests for default listener identities."""

    def test_default_identity_includes_module(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.twin"))

        assert result.ok, result.errors
        assert [d.identity for d in result.descriptors] == [
            "sample_plugins.twin.one.on_join:PlayerJoinEvent",
            "sample_plugins.twin.two.on_join:PlayerJoinEvent",
        ]

    def test_explicit_identity_is_kept(self):
        result = Scanner().scan(PackageUnitSource("sample_plugins.economy"))

        assert "chat-audit" in [d.identity for d in result.of_kind(CapabilityKind.LISTENER)]


class TestRequires:
    """Tests for explicit `requires` dependency lists."""

    def test_command_function_takes_dependencies_first(self):
        @command("vault", requires=(Bank,))
        def vault(bank, invoker, arguments):
            pass

        result = scan_objects(vault)

        assert result.ok, result.errors
        (dep,) = result.descriptors[0].dependencies
        assert dep.key is Bank
        assert dep.name is None

    def test_command_function_missing_dependency_parameter(self):
        @command("vault", requires=(Bank,))
        def vault(invoker, arguments):
            pass

        result = scan_objects(vault)

        (error,) = result.errors
        assert error.identity == "vault"
        assert "1 required dependency parameter(s) followed by (invoker, arguments)" in (
            error.message
        )

    def test_listener_function_takes_dependencies_first(self):
        @listener(PlayerJoinEvent, identity="welcome", requires=(Bank, EconomySettings))
        def welcome(bank, settings, event):
            pass

        @listener(PlayerJoinEvent, identity="farewell", requires=(Bank,))
        def farewell(event):
            pass

        result = scan_objects(welcome, farewell)

        assert [d.identity for d in result.descriptors] == ["welcome"]
        (error,) = result.errors
        assert error.identity == "farewell"
        assert "followed by (event)" in error.message

    def test_unfilled_keyword_only_parameters_are_rejected(self):
        @command("vault", requires=(Bank,))
        def vault(bank, invoker, arguments, *, settings: EconomySettings):
            pass

        result = scan_objects(vault)

        assert "keyword-only parameters need defaults: settings" in result.errors[0].message

    def test_constructor_must_accept_required_keys(self):
        @command("home", requires=(Bank, EconomySettings))
        class HomeCommand:
            def __init__(self, store):
                self.store = store

            def execute(self, invoker, arguments):
                pass

        result = scan_objects(HomeCommand)

        assert "must accept 2 positional dependency parameter(s)" in result.errors[0].message


class TestAsynchronousCommands:
    """Tests for the asynchronous command flag."""

    def test_flag_is_recorded(self):
        @command("backup", asynchronous=True)
        def backup(invoker, arguments):
            pass

        @command("ping")
        def ping(invoker, arguments):
            pass

        result = scan_objects(backup, ping)

        flags = {d.identity: d.metadata.asynchronous for d in result.descriptors}
        assert flags == {"backup": True, "ping": False}
        assert describe(result.descriptors[0]) == "async"

    def test_flag_must_be_bool(self):
        @command("backup", asynchronous="yes")
        def backup(invoker, arguments):
            pass

        result = scan_objects(backup)

        assert "asynchronous must be a bool" in result.errors[0].message
