"""
Shared constants for the editing system.

These values are used by the controller, the hit-tester and the SVG
renderer, so hit areas match what is drawn.
"""

# Key names as reported by the keyboard element
DELETE_KEYS = ('Delete', 'Backspace')

# Modifier that turns a press into a connect gesture (or creates a node on
# the empty canvas) and a click into a label edit
CONNECT_MODIFIER = 'shift'
EDIT_MODIFIER = 'shift'

# Node circle radius in canvas pixels
NODE_RADIUS = 50

# A release closer than this to its press is a click, not a drag
CLICK_DISTANCE = 5

# Distance in pixels to detect edge hover
EDGE_HOVER_TOLERANCE = 8

# Canvas size in pixels
CANVAS_WIDTH = 1000
CANVAS_HEIGHT = 800
