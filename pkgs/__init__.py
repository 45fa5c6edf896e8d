"""
Core runtime packages of the Arxis engine.

Tensor algebra, rotation algebra, configuration, recording and logging live here;
the 4D geometry and relativistic physics layers are built on top of them.
"""
