from __future__ import annotations

from graphwire import All, wirer
from sample_app.contracts import ICommand, IPlugin


class PluginCommand(ICommand):
    def __init__(self, plugin: IPlugin) -> None:
        self.plugin = plugin

    def execute(self) -> str:
        return f"run {self.plugin.run()}"


@wirer
class PluginCommands:
    @staticmethod
    def wire(plugins: All[IPlugin]) -> tuple[ICommand, ...]:
        return tuple(PluginCommand(plugin) for plugin in plugins)
