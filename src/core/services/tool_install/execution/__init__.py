"""
L4 Execution — functions that WRITE to the system: subprocess
calls and the npm install.
"""
