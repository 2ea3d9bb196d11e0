"""Exception hierarchy for configuration and per-item failures."""

from pixmin.utils.constants import PLUGIN_PACKAGE_PREFIX


class PixminError(Exception):
    """Base class for all errors raised by pixmin."""


class ConfigurationError(PixminError):
    """A global precondition failed; the run must stop with exit status 1."""


class PluginNotFoundError(ConfigurationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown plugin: {name}\n"
            "\n"
            "Did you forget to install the plugin?\n"
            "You can install it with:\n"
            "\n"
            f"  $ pip install {PLUGIN_PACKAGE_PREFIX}{name}"
        )


class PluginUnavailableError(ConfigurationError):
    def __init__(self, name: str, binary: str):
        self.name = name
        self.binary = binary
        super().__init__(
            f"Plugin {name} requires the '{binary}' executable, which was not found on PATH.\n"
            f"Install it first (e.g. brew install {binary}), or pick other plugins with --plugin."
        )


class MultipleStdoutError(ConfigurationError):
    def __init__(self):
        super().__init__("Cannot write multiple files to stdout, specify an output directory")


class DuplicateDestinationError(ConfigurationError):
    def __init__(self, destination, first: str, second: str):
        self.destination = destination
        super().__init__(
            f"Both {first} and {second} would be written to {destination}; "
            "rename one of them or minify them separately"
        )


class NoInputError(ConfigurationError):
    def __init__(self):
        super().__init__("Specify at least one filename")


class EmptyPluginChainError(ConfigurationError):
    def __init__(self):
        super().__init__("No plugins configured; nothing would be applied to the images")


class InvalidSettingError(ConfigurationError):
    def __init__(self, name: str, value: str, expected: str):
        self.setting = name
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")


class PluginError(PixminError):
    """A plugin failed to transform one item's bytes."""

    def __init__(self, plugin: str, message: str):
        self.plugin = plugin
        super().__init__(f"{plugin}: {message}")
