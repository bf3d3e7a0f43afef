import collections
import datetime
import logging

from baseplate.lib import config
from baseplate.lib.secrets import (
    CorruptSecretError,
    SecretNotFoundError,
    SecretsNotAvailableError,
    secrets_store_from_config,
)

from .errors import ConfigError
from .namespaces import ChannelOptions, Namespace, NamespaceRegistry


LOG = logging.getLogger(__name__)


DEFAULT_NAME = "centrifugo"
DEFAULT_NODE_PING_INTERVAL = 3


def _seconds(value):
    return datetime.timedelta(seconds=value)


CHANNEL_OPTIONS_SPEC = {
    "watch": config.Optional(config.Boolean, default=False),
    "publish": config.Optional(config.Boolean, default=False),
    "anonymous": config.Optional(config.Boolean, default=False),
    "presence": config.Optional(config.Boolean, default=False),
    "join_leave": config.Optional(config.Boolean, default=False),
    "history_size": config.Optional(config.Integer, default=0),
    "history_lifetime": config.Optional(config.Integer, default=0),
    "history_drop_inactive": config.Optional(config.Boolean, default=False),
    "recover": config.Optional(config.Boolean, default=False),
}


CONFIG_SPEC = {
    "node": {
        "name": config.Optional(config.String, default=DEFAULT_NAME),
        "secret": config.Optional(config.String, default=""),
        "secret_path": config.Optional(config.String, default=""),

        "ping_interval": config.Optional(
            config.Timespan, default=_seconds(DEFAULT_NODE_PING_INTERVAL)),
        "info_clean_interval": config.Optional(
            config.Timespan, default=_seconds(DEFAULT_NODE_PING_INTERVAL * 3)),
        "info_max_delay": config.Optional(
            config.Timespan, default=_seconds(DEFAULT_NODE_PING_INTERVAL * 2 + 1)),
        "metrics_interval": config.Optional(config.Timespan, default=_seconds(60)),
    },

    "presence": {
        "ping_interval": config.Optional(config.Timespan, default=_seconds(25)),
        "expire_interval": config.Optional(config.Timespan, default=_seconds(60)),
    },

    "client": {
        "insecure": config.Optional(config.Boolean, default=False),
        "expire": config.Optional(config.Boolean, default=False),
        "ping_interval": config.Optional(config.Timespan, default=_seconds(25)),
        "expired_close_delay": config.Optional(config.Timespan, default=_seconds(25)),
        "stale_close_delay": config.Optional(config.Timespan, default=_seconds(25)),
        # zero disables the write timeout; slow clients are then cut off by
        # queue_max_size instead
        "message_write_timeout": config.Optional(config.Timespan, default=_seconds(0)),
        "request_max_size": config.Optional(config.Integer, default=65536),
        "queue_max_size": config.Optional(config.Integer, default=10485760),
        "channel_limit": config.Optional(config.Integer, default=128),
        "user_connection_limit": config.Optional(config.Integer, default=0),
    },

    "channel": dict(
        CHANNEL_OPTIONS_SPEC,
        max_length=config.Optional(config.Integer, default=255),
        private_prefix=config.Optional(config.String, default="$"),
        namespace_boundary=config.Optional(config.String, default=":"),
        user_boundary=config.Optional(config.String, default="#"),
        user_separator=config.Optional(config.String, default=","),
        client_boundary=config.Optional(config.String, default="&"),
    ),

    "namespaces": config.Optional(config.TupleOf(config.String), default=[]),
    "namespace": config.DictOf(CHANNEL_OPTIONS_SPEC),
}


def _channel_options(section):
    return ChannelOptions(**{
        field: getattr(section, field) for field in ChannelOptions._fields})


class NodeConfig(collections.namedtuple("NodeConfig", "name secret registry tuning")):
    """The applied configuration of a node; ``tuning`` is passed through as parsed."""

    __slots__ = ()

    @property
    def insecure(self):
        return self.tuning.client.insecure

    def channel_options(self, namespace):
        return self.registry.resolve(namespace)


def _load_secret(raw_config, cfg):
    if not cfg.node.secret_path:
        return cfg.node.secret.encode("utf-8")

    secrets = secrets_store_from_config(raw_config)
    try:
        return secrets.get_simple(cfg.node.secret_path)
    except (CorruptSecretError, SecretNotFoundError, SecretsNotAvailableError) as exc:
        raise ConfigError("cannot read secret %s: %s" % (cfg.node.secret_path, exc))


def load_config(raw_config):
    """Parse a raw config mapping into a validated :py:class:`NodeConfig`."""
    try:
        cfg = config.parse_config(raw_config, CONFIG_SPEC)
    except config.ConfigurationError as exc:
        raise ConfigError(str(exc))

    option_blocks = cfg.namespace
    for name in option_blocks:
        if name not in cfg.namespaces:
            LOG.warning("options given for undeclared namespace %r, ignoring", name)

    namespaces = []
    for name in cfg.namespaces:
        if name in option_blocks:
            options = _channel_options(option_blocks[name])
        else:
            options = ChannelOptions()
        namespaces.append(Namespace(name, options))

    registry = NamespaceRegistry(_channel_options(cfg.channel), namespaces)

    secret = _load_secret(raw_config, cfg)
    if not secret and not cfg.client.insecure:
        raise ConfigError("secret must be set unless client.insecure is on")

    LOG.info("loaded config for node %s with %d namespaces", cfg.node.name, len(registry))
    return NodeConfig(name=cfg.node.name, secret=secret, registry=registry, tuning=cfg)


class ConfigHolder(object):
    """Holds the active :py:class:`NodeConfig`; a reload swaps the whole value."""

    def __init__(self, node_config):
        self._current = node_config

    @property
    def current(self):
        return self._current

    def reload(self, raw_config):
        """Apply a new raw config, keeping the current one if it is invalid."""
        try:
            node_config = load_config(raw_config)
        except ConfigError:
            LOG.exception("reload rejected, keeping config of node %s", self._current.name)
            raise

        self._current = node_config
        LOG.info("reloaded config for node %s", node_config.name)
        return node_config
