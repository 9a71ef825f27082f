"""
WebSocket Package

Socket.IO handlers for per-game realtime subscriptions.
"""
