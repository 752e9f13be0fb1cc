"""Business services shared by webhooks and dashboard routes"""
