"""
Agency portal service: project comment threads, mentions and notifications.
"""
