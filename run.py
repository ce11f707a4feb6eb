#!/usr/bin/env python3
"""
PitchLog - Development Entry Point
Personal football performance tracker API
"""

from pitchlog.main import main

if __name__ == '__main__':
    main()
