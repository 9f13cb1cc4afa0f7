"""
Contract Tests
--------------
API surface tests: public symbols exist and stable values do not drift.
"""


class TestCommandsAPI:

    def test_exports_exist(self):
        from commands import (
            CommandPreprocessor,
            CommandRegistry,
            CommandType,
            DetectionResult,
            IntentTriggers,
            RegistryError,
            normalize,
            normalize_phrase,
        )

        assert CommandPreprocessor is not None
        assert DetectionResult is not None

    def test_command_type_values(self):
        from commands import CommandType

        # Wire values must remain stable
        assert CommandType.GALLERY.value == "GALLERY"
        assert CommandType.NONE.value == "NONE"

    def test_detection_fields(self):
        from dataclasses import fields
        from commands import DetectionResult

        names = [f.name for f in fields(DetectionResult)]
        assert names[:4] == [
            "is_command", "command_type", "original_message", "normalized_command"
        ]


class TestCoreAPI:

    def test_exports_exist(self):
        from core import (
            Orchestrator,
            OrchestratorConfig,
            MessageResult,
            MockDialogue,
            ErrorHandler,
            AidaError,
            ErrorCategory,
        )

        assert Orchestrator is not None

    def test_routes(self):
        from core import ROUTE_COMMAND, ROUTE_CONVERSATION

        assert ROUTE_COMMAND == "command"
        assert ROUTE_CONVERSATION == "conversation"


class TestInfraAPI:

    def test_exports_exist(self):
        from infra import (
            AppConfig,
            ConfigManager,
            ServiceBus,
            TurnContext,
            configure_logging,
            create_app,
            get_logger,
        )

        assert ServiceBus is not None


class TestEntryPoints:

    def test_console_parser(self):
        import main
        assert callable(main.main)

    def test_server_parser(self):
        from infra.server import build_parser

        args = build_parser().parse_args(["--port", "9000", "--registry", "x.yaml"])
        assert args.port == 9000
        assert args.registry == "x.yaml"
        assert args.host is None
