"""Calendar and time-of-day helpers"""
