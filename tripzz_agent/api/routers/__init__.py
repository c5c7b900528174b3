"""API routers: chat and context"""
