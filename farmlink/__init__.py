"""
FarmLink server.

Connects farmers with agricultural specialists for scheduled video
consultations: a REST API over the call directory and a WebSocket relay for
WebRTC signaling, call status and in-call chat.
"""

__version__ = "0.1.0"
