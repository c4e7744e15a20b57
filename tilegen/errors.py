class WFCError(ValueError):
    """Base class for configuration errors raised by the generator."""


class InvalidDimension(WFCError):
    def __init__(self, width, height):
        super().__init__(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height


class UnknownLabel(WFCError, KeyError):
    def __init__(self, label, context: str = "adjacency model"):
        super().__init__(f"Label {label!r} has no entry in the {context}")
        self.label = label

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class OutOfBounds(WFCError, IndexError):
    def __init__(self, x, y, width, height):
        super().__init__(f"Cell ({x}, {y}) is outside a {width}x{height} grid")
        self.x = x
        self.y = y


class ConfigError(WFCError):
    pass
