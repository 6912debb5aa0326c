"""
Routes package - Blueprint-based routes.
"""

from flask import Flask


def register_blueprints(app: Flask):
    """
    Register route blueprints.

    Called from app.py after the cache and proxy settings are configured.
    """
    from outreach_dashboard.routes import dashboard, proxy

    app.register_blueprint(dashboard.bp)
    app.register_blueprint(proxy.bp, url_prefix='/api')
