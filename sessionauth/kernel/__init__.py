"""
Kernel: persistence models and the identity core.
"""
