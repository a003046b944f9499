# Routes package - registers all blueprints with the Flask app

def register_blueprints(app):
    """Register all route blueprints with the Flask app."""
    from .trackers import trackers_bp

    app.register_blueprint(trackers_bp)
