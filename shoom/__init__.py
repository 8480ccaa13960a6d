"""
Shoom - real-time debate show backend
"""
