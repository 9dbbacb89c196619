"""
Tracking package: break reminder settings and scheduling.
"""
