#!/usr/bin/env python3
"""
Provision Script

Runs the provisioner CLI from a source checkout without installing it.
"""

import os
import sys

# Add the parent directory to the path so we can import the provisioner package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from provisioner.cli import main

if __name__ == "__main__":
    sys.exit(main())
