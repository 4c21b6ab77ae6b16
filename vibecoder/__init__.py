"""
VibeCoder Academy - Vibe Coding Tutor for Kids

Kids describe what they want in plain words, an AI coach judges the request
and writes the Python, and a simulated run draws the result on a canvas.
"""

__version__ = "0.1.0"
