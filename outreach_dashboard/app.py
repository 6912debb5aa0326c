"""
Outreach Analytics Dashboard - Flask application.

Serves the campaign analytics dashboard and the upstream analytics proxy.
"""

import argparse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from flask import Flask, jsonify, render_template, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from outreach_dashboard import formatting
from outreach_dashboard.api_client import AnalyticsClient
from outreach_dashboard.cache import DEFAULT_TTL_SECONDS, AnalyticsQueryCache
from outreach_dashboard.routes import register_blueprints
from outreach_dashboard.settings import (
    get_app_settings, get_client_settings, get_proxy_settings,
)


def create_app(
    analytics_client: Optional[AnalyticsClient] = None,
    config_overrides: Optional[Dict[str, Any]] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        analytics_client: Client used by the dashboard. Built from
            DASHBOARD_INSTANTLY_API_KEY when None.
        config_overrides: Extra Flask config (e.g. TESTING, RATELIMIT_ENABLED)

    Returns:
        Flask app instance

    Raises:
        ConfigurationError: If no client is given and its credential is missing
    """
    app = Flask(__name__)

    app_settings = get_app_settings()
    app.secret_key = app_settings.secret_key
    app.config["TEMPLATES_AUTO_RELOAD"] = True
    app.config["CACHE_TTL_SECONDS"] = DEFAULT_TTL_SECONDS
    if config_overrides:
        app.config.update(config_overrides)

    # Resolve both credentials once, at startup
    if analytics_client is None:
        analytics_client = AnalyticsClient.from_settings(get_client_settings())
    app.config['ANALYTICS_CLIENT'] = analytics_client
    app.config['PROXY_SETTINGS'] = get_proxy_settings()
    # Pooled connections for the proxy; credentials are set per request
    app.config['PROXY_SESSION'] = requests.Session()

    app.config['ANALYTICS_CACHE'] = AnalyticsQueryCache(
        analytics_client.get_campaign_analytics,
        ttl=app.config["CACHE_TTL_SECONDS"],
    )

    if not app.debug and not app.testing:
        logs_dir = Path(app_settings.log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            logs_dir / 'dashboard.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(getattr(logging, app_settings.log_level, logging.INFO))
        app.logger.info('Dashboard startup')

    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=["1000 per day", "100 per hour"],
        storage_uri="memory://",
    )
    app.config['LIMITER'] = limiter

    app.jinja_env.filters['number'] = formatting.format_number
    app.jinja_env.filters['thousands'] = formatting.format_count
    app.jinja_env.filters['percent'] = formatting.format_percent

    register_blueprints(app)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        if request.path.startswith('/api/'):
            return jsonify({
                'error': 'Not found',
                'message': f'Endpoint {request.path} does not exist'
            }), 404
        return render_template(
            'error.html', title='Page Not Found',
            message=f'{request.path} does not exist.', hint=None,
        ), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        app.logger.error(f'Server Error: {error}')
        if request.path.startswith('/api/'):
            return jsonify({
                'error': 'Internal server error',
                'message': 'An unexpected error occurred. Please try again.'
            }), 500
        return render_template(
            'error.html', title='Server Error',
            message='An unexpected error occurred. Please try again.', hint=None,
        ), 500

    @app.errorhandler(429)
    def ratelimit_error(error):
        """Handle rate limit errors."""
        return jsonify({
            'error': 'Rate limit exceeded',
            'message': 'Too many requests. Please slow down.'
        }), 429

    return app


def main():
    """Run the dashboard server."""
    parser = argparse.ArgumentParser(description="Outreach analytics dashboard")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    app = create_app()

    print("=" * 80)
    print("OUTREACH ANALYTICS - Dashboard Starting")
    print("=" * 80)
    print(f"Dashboard running at: http://{args.host}:{args.port}")
    print(f"Analytics proxy:      http://{args.host}:{args.port}/api/campaigns/analytics")
    if not app.config['PROXY_SETTINGS'].api_key:
        print("WARNING: INSTANTLY_API_KEY not set - proxy will answer 500")
    print()
    print("Press CTRL+C to stop")
    print("=" * 80)
    print()

    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
