"""
Outer surfaces of the bot: GitHub access, scheduling and the webhook service.
"""
