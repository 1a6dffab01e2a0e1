"""
EduOrbit graph engine
Turns a plain-text syllabus into a prerequisite DAG, lays it out as
concentric orbits and finds study paths through it.
"""

__version__ = "0.1.0"
