"""
BTSim - Browser Threat Simulator

Phishing simulation planning and credential-risk detection engine.
"""

__version__ = "1.0.0"
