"""
Service layer.

``bill_store`` owns persistence and ``analytics_service`` holds the
business logic; API handlers only translate between HTTP and the
engine.
"""
