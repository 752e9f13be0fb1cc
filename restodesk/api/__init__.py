"""Dashboard API routers"""
