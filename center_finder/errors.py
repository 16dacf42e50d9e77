"""
Error handlers for the application.
"""
from flask import Blueprint, render_template
from center_finder.center_data import DirectoryLoadError
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('errors', __name__)

@bp.app_errorhandler(404)
def not_found_error(error):
    """Handle 404 errors."""
    return render_template('error.html', error_code=404, message="Page not found"), 404

@bp.app_errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    logger.error(f"Internal error: {error}", exc_info=True)
    return render_template('error.html', error_code=500, message="An error occurred. Please try again later."), 500

@bp.app_errorhandler(DirectoryLoadError)
def directory_unavailable(error):
    """Handle a missing or malformed center dataset."""
    logger.error(f"Center directory unavailable: {error}")
    return render_template('error.html', error_code=500, message="Center listings are unavailable. Please try again later."), 500

@bp.app_errorhandler(403)
def forbidden_error(error):
    """Handle 403 errors."""
    return render_template('error.html', error_code=403, message="Access forbidden"), 403
