"""
Flask Application Factory
Read-only meditation center directory: no authentication or database
"""
from flask import Flask
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Initialize logging before app creation
def setup_logging(app):
    """Configure logging for the application."""
    # Ensure log directory exists
    log_dir = Path(app.config.get('LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set logging level based on config
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    app.logger.setLevel(level)

    # Package loggers (logging.getLogger(__name__)) share the app handlers
    package_logger = logging.getLogger('center_finder')
    package_logger.setLevel(level)

    # Console logging (always enabled for visibility)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    ))
    console_handler.setLevel(level)

    # File logging (always enabled)
    file_handler = RotatingFileHandler(
        log_dir / 'app.log',
        maxBytes=10240000,  # 10MB
        backupCount=10
    )
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    file_handler.setLevel(level)

    # app.logger is 'center_finder' when the app is created from this package
    for logger in {app.logger, package_logger}:
        # create_app may run more than once per process (tests)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.addHandler(console_handler)
        logger.addHandler(file_handler)
        # Prevent duplicate logs
        logger.propagate = False

    app.logger.info('Center Finder startup')

def create_app(config_class=None):
    """
    Create and configure Flask application.

    Args:
        config_class: Configuration class (defaults to DevelopmentConfig)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        from center_finder.config import DevelopmentConfig
        config_class = DevelopmentConfig

    app.config.from_object(config_class)

    # Setup logging
    setup_logging(app)

    # Register blueprints
    from center_finder.routes import bp as main_bp
    from center_finder.errors import bp as errors_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(errors_bp)

    @app.context_processor
    def inject_maps_settings():
        return {
            'geolocation_options': app.config['GEOLOCATION_OPTIONS'],
        }

    return app
