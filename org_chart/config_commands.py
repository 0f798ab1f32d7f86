"""`oc config` commands: backend connection and layout settings."""

from cyclopts import App

from org_chart.config import DEFAULTS, get_config

config_app = App(name="config", help="Manage backend and layout settings")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Store a setting.

    Examples:
        oc config set backend http
        oc config set http.base_url http://localhost:3000
        oc config set layout.direction RIGHT --global

    Args:
        key: Setting name (backend, http.base_url, http.timeout, notion.token,
            notion.database_id, yaml.path or layout.algorithm/direction/spacing/layer_spacing)
        value: New value
        global_: Write to ~/.org-chart/config.yaml instead of ./.org-chart/config.yaml
    """
    get_config(use_global=global_).set(key, value)
    print(f"Set {key} = {value} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Remove a setting so the global value or the built-in default applies again.

    Example:
        oc config unset layout.spacing
    """
    get_config(use_global=global_).unset(key)
    print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the effective value of a setting.

    Values that come from the built-in defaults (backend yaml, layout
    layered/DOWN/50/80, ...) are marked "(default)".

    Args:
        key: Setting name
        global_: Only look at the global config file
    """
    config = get_config(use_global=global_)
    value = config.get(key)
    if value is None:
        print(f"{key} is not set")
    elif key not in config.list():
        print(f"{key} = {value} (default)")
    else:
        print(f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False, defaults: bool = False) -> None:
    """List the settings in effect for this directory.

    Args:
        global_: Only list the global config file
        defaults: Include built-in defaults that are not overridden
    """
    settings = get_config(use_global=global_).list()
    if defaults:
        for key, value in DEFAULTS.items():
            settings.setdefault(key, f"{value} (default)")

    if not settings:
        print(f"No {_scope(global_)} settings, using defaults (see --defaults)")
        return

    print("Global settings:\n" if global_ else "Settings:\n")
    for key in sorted(settings):
        print(f"{key} = {settings[key]}")
