from .base import *  # noqa: F403
from .celery import *  # noqa: F403
from .ninja import *  # noqa: F403
from .observability import *  # noqa: F403
from .payments import *  # noqa: F403
from .sms import *  # noqa: F403
from .unfold import *  # noqa: F403
