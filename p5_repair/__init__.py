"""
p5-repair - best-effort repair of self-contained p5.js / THREE.js pages.
"""

__version__ = "0.1.0"
