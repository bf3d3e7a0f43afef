import collections
import logging
import re

from .errors import ConfigError


LOG = logging.getLogger(__name__)

NAMESPACE_NAME_RE = re.compile(r"[-a-zA-Z0-9_]{2,}")


_OPTION_DEFAULTS = collections.OrderedDict([
    ("watch", False),
    ("publish", False),
    ("anonymous", False),
    ("presence", False),
    ("join_leave", False),
    ("history_size", 0),
    ("history_lifetime", 0),
    ("history_drop_inactive", False),
    ("recover", False),
])


ChannelOptions = collections.namedtuple(
    "ChannelOptions",
    list(_OPTION_DEFAULTS),
    defaults=list(_OPTION_DEFAULTS.values()),
)
ChannelOptions.__doc__ = """Policy applied to the channels of one namespace.

The registry never looks inside; it only hands the record back on lookup.

"""


Namespace = collections.namedtuple("Namespace", ["name", "options"])


def validate_namespaces(namespaces):
    """Check namespace names for shape and uniqueness.

    Names are checked in order and the first violation found is raised as a
    :py:class:`ConfigError`.

    """
    seen = set()
    for namespace in namespaces:
        name = namespace.name
        if not isinstance(name, str) or not NAMESPACE_NAME_RE.fullmatch(name):
            raise ConfigError("wrong namespace name – %s" % (name,))
        if name in seen:
            raise ConfigError("namespace name must be unique")
        seen.add(name)


class NamespaceRegistry(object):
    """Channel options for the global scope and each declared namespace.

    The registry is validated on construction and never changes afterwards.
    A configuration reload builds a new registry instead of touching this
    one, so lookups are safe from any number of concurrent callers.

    The empty name always resolves to the default options.

    """

    def __init__(self, default_options=None, namespaces=()):
        namespaces = tuple(Namespace(*namespace) for namespace in namespaces)
        validate_namespaces(namespaces)

        self._default = default_options if default_options is not None else ChannelOptions()
        self._namespaces = namespaces
        self._by_name = {namespace.name: namespace.options for namespace in namespaces}

        LOG.debug("registry built with namespaces: %s", ", ".join(self.names) or "<none>")

    @property
    def default_options(self):
        return self._default

    @property
    def names(self):
        return tuple(namespace.name for namespace in self._namespaces)

    def __iter__(self):
        return iter(self._namespaces)

    def __len__(self):
        return len(self._namespaces)

    def resolve(self, name):
        """Return ``(options, found)`` for the namespace ``name``.

        An unknown namespace is not an error: ``found`` is False and the
        options are the zero value, leaving the caller to pick between
        default-deny and default-policy behaviour.

        """
        if name == "":
            return self._default, True
        try:
            return self._by_name[name], True
        except (KeyError, TypeError):
            return ChannelOptions(), False
