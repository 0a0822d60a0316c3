"""Real-time delivery — the /live websocket.

Learn: Frames flow from the update loop's Broadcaster into one Outbox per
connection; the websocket handler drains that Outbox onto the socket.
"""
