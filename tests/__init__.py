"""Test package for the Mental Math Trainer.

Core tests (problem generation, level rules, round controller, storage) use
a fake clock and never import pygame.  UI tests run headlessly using pygame's
dummy video driver.  To run these tests, execute ``pytest`` from the project
root.
"""
