class Notifier:
    """Collects toast-style messages raised while handling one request"""

    def __init__(self):
        self.messages = []

    def _push(self, level, message):
        print(f"[{level}] {message}")
        self.messages.append({"level": level, "message": message})

    def error(self, message):
        self._push("error", message)

    def success(self, message):
        self._push("success", message)

    def info(self, message):
        self._push("info", message)
