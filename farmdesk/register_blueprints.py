"""
Centralized Blueprint Registration
All blueprints MUST be registered inside register_all_blueprints(app)
"""

import logging

logger = logging.getLogger(__name__)


def register_all_blueprints(app):

    # Root
    from farmdesk.routes.root_routes import root_bp
    app.register_blueprint(root_bp)

    # Auth
    from farmdesk.routes.auth_routes import auth_bp
    app.register_blueprint(auth_bp)

    # Admin modules
    from farmdesk.routes.admin.pending_routes import pending_bp
    from farmdesk.routes.admin.purchase_routes import purchase_bp
    from farmdesk.routes.admin.processing_routes import processing_bp
    from farmdesk.routes.admin.inventory_routes import inventory_bp
    from farmdesk.routes.admin.product_routes import products_bp
    from farmdesk.routes.admin.task_routes import tasks_bp

    app.register_blueprint(pending_bp)
    app.register_blueprint(purchase_bp)
    app.register_blueprint(processing_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(tasks_bp)

    # Customer
    from farmdesk.routes.customer.review_routes import reviews_bp
    app.register_blueprint(reviews_bp)

    logger.info("All blueprints registered")
