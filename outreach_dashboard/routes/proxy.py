"""
Analytics proxy route - forwards GET /api/campaigns/analytics upstream.

The server-held credential is always used; a client-supplied Authorization
header is never forwarded. Upstream status and JSON body are relayed as-is.
"""

from flask import Blueprint, current_app, jsonify, request

from outreach_dashboard.api_client import ANALYTICS_PATH
from outreach_dashboard.logging_config import setup_logging

logger = setup_logging(__name__)

bp = Blueprint('proxy', __name__)


@bp.route("/campaigns/analytics", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def campaigns_analytics():
    """
    GET /api/campaigns/analytics?<forwarded-query>

    Returns:
        Upstream status and JSON body, or
        405 {"error": "Method not allowed"} for non-GET,
        500 {"error": "API key not configured"} without a server credential,
        500 {"error": "Failed to fetch analytics"} on any other failure
    """
    if request.method != "GET":
        return jsonify({"error": "Method not allowed"}), 405

    settings = current_app.config['PROXY_SETTINGS']
    if not settings.api_key:
        logger.error("INSTANTLY_API_KEY is not configured")
        return jsonify({"error": "API key not configured"}), 500

    session = current_app.config['PROXY_SESSION']
    url = f"{settings.api_base_url}{ANALYTICS_PATH}"
    params = list(request.args.items(multi=True))

    try:
        response = session.get(
            url,
            params=params,
            headers={
                'Authorization': f'Bearer {settings.api_key}',
                'Content-Type': 'application/json',
            },
        )
        data = response.json()
    except Exception as e:
        logger.error(f"API proxy error: {type(e).__name__}: {e}")
        return jsonify({"error": "Failed to fetch analytics"}), 500

    if not response.ok:
        logger.warning(f"Upstream returned {response.status_code} for {url}")
        return jsonify(data), response.status_code

    return jsonify(data), 200
