class ConfigError(Exception):
    """Raised when the node configuration cannot be applied.

    Fatal at startup. During a reload the node keeps running on the
    previously applied configuration.

    """

    prefix = "config error: "

    def __init__(self, message):
        self.message = message
        super(ConfigError, self).__init__(self.prefix + message)
