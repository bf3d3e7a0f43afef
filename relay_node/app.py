import logging
import signal

import gevent
import manhole

from .auth import check_api_sign, check_channel_sign, check_connection_token
from .config import ConfigHolder, load_config
from .errors import ConfigError


LOG = logging.getLogger(__name__)


class TrustGateway(object):
    """Authorization checks called by the connection, API and subscription layers."""

    def __init__(self, holder):
        self.holder = holder

    @property
    def config(self):
        return self.holder.current

    def authorize_connection(self, project_key, user, timestamp, info, token):
        node_config = self.config
        if node_config.insecure:
            return True
        if check_connection_token(node_config.secret, project_key, user, timestamp, info, token):
            return True
        LOG.info("rejected connection for user %r", user)
        return False

    def authorize_api_request(self, project_key, encoded_data, sign):
        if check_api_sign(self.config.secret, project_key, encoded_data, sign):
            return True
        LOG.info("rejected api request for project %r", project_key)
        return False

    def authorize_subscription(self, client, channel, channel_data, sign):
        if check_channel_sign(self.config.secret, client, channel, channel_data, sign):
            return True
        LOG.info("rejected subscription of client %r to %r", client, channel)
        return False

    def channel_options(self, namespace):
        return self.config.channel_options(namespace)


def make_app(raw_config, reload_source=None):
    node_config = load_config(raw_config)
    holder = ConfigHolder(node_config)
    app = TrustGateway(holder)

    manhole.install(oneshot_on="USR1")

    if reload_source is not None:
        def _reload():
            try:
                holder.reload(reload_source())
            except ConfigError:
                # already logged by the holder; keep serving the old config
                pass
            except Exception:
                LOG.exception("reload failed, keeping config of node %s", holder.current.name)

        # reload outside of the signal handler, the parsing may be slow
        def _handle_reload_signal(_, frame):
            gevent.spawn(_reload)

        signal.signal(signal.SIGHUP, _handle_reload_signal)
        signal.siginterrupt(signal.SIGHUP, False)

    LOG.info("node %s ready", node_config.name)
    return app
