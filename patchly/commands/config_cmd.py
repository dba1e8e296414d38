"""
ConfigCommand — Configuration display and modification

Handles configuration operations:
- Displaying current configuration and which backends are usable
- Setting configuration values (project or user scope)
"""

from ..commands.base import BaseCommand
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate
from ..services.providers import get_provider_status


class ConfigCommand(BaseCommand):
    """
    Command for configuration management.
    """

    def show_config(self) -> int:
        """Show current configuration."""
        symbols = self.symbols
        oracle_ok = self._cli.oracle_available

        backends = [
            f"LLM: {get_provider_status(self.config)}",
            f"Oracle: {'recheck' if oracle_ok else 'recheck not installed'}",
        ]

        template = OutputTemplate(symbols=symbols)
        template.header("PATCHLY CONFIG", "Current Configuration")
        template.section("SETTINGS", self.config_manager.display())
        template.section("BACKENDS", template.format_list(backends))
        output = template.render(command="config", context={"no_provider": not self.config.llm.is_available})
        safe_print(output)
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value."""
        symbols = self.symbols
        error = self.config_manager.set(key, value, scope)

        template = OutputTemplate(symbols=symbols)

        if error:
            template.header("PATCHLY CONFIG", "Error")
            template.section("ERROR", error)
            safe_print(template.render(command="config"))
            return 1

        template.header("PATCHLY CONFIG", "Configuration Updated")
        template.section("SETTING", f"Set {key} = {value}")
        if scope == "project":
            template.section("SAVED TO", str(self.config_manager.project_config_path))
        else:
            template.section("SAVED TO", str(self.config_manager.user_config_path))
        template.footer(f"{symbols.check_pass} Configuration saved")
        safe_print(template.render(command="config"))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., llm.provider=claude)')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., llm.provider=claude)")
            return 2
        key, value = args.set.split('=', 1)
        scope = "user" if args.user else "project"
        return cli._config_cmd.set_config(key, value, scope)
    return cli._config_cmd.show_config()
