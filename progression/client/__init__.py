from progression.client.api_client import ProgressApiClient
from progression.client.host import HostContext, StaticHostContext
from progression.client.poller import ProgressPoller

__all__ = [
    'ProgressApiClient',
    'HostContext',
    'StaticHostContext',
    'ProgressPoller'
]
