"""
BTSim API Package
"""
