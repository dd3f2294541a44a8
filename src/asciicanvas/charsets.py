# Cells are single bytes; text is moved in and out of a canvas as latin-1 so
# every byte value maps to exactly one character.
ENCODING = "latin-1"

# Default cell for blank canvases and the trim key
BLANK = " "

# Drawn by a viewport where the window extends past the canvas edge
OUTSIDE_FILL = "X"
