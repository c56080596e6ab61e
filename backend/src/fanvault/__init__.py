"""FanVault moderation backend - staging, review and retention of user-submitted images"""

__version__ = "0.1.0"
