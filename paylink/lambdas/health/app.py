from typing import Any

from paylink.utils.helpers import guarantee_500_response
from paylink.utils.responses import text_response


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Liveness probe: GET /health -> 200 'ok'

    Doesn't read configuration or call external providers.
    """
    return text_response(200, 'ok')
