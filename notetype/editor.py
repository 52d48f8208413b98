from dataclasses import dataclass, field


@dataclass
class EditorBuffer:
    lines: list = field(default_factory=lambda: [""])
    cursor_y: int = 0
    cursor_x: int = 0
    preferred_x: int = 0
    scroll_y: int = 0
    scroll_x: int = 0
    dirty: bool = False

    @property
    def value(self) -> str:
        return "\n".join(self.lines)

    def set_value(self, text: str, cursor_at_end: bool = True):
        self.lines = text.split("\n") if text else [""]
        if cursor_at_end:
            self.cursor_y = len(self.lines) - 1
            self.cursor_x = len(self.lines[-1])
        else:
            self.cursor_y = 0
            self.cursor_x = 0
        self.preferred_x = self.cursor_x
        self.scroll_y = 0
        self.scroll_x = 0
        self.dirty = False

    def keep_cursor_in_bounds(self):
        self.cursor_y = max(0, min(self.cursor_y, len(self.lines) - 1))
        self.cursor_x = max(0, min(self.cursor_x, len(self.lines[self.cursor_y])))

    def ensure_cursor_visible(self, height: int, width: int):
        self.keep_cursor_in_bounds()
        height = max(1, height)
        width = max(1, width)
        if self.cursor_y < self.scroll_y:
            self.scroll_y = self.cursor_y
        elif self.cursor_y >= self.scroll_y + height:
            self.scroll_y = self.cursor_y - height + 1
        if self.cursor_x < self.scroll_x:
            self.scroll_x = self.cursor_x
        elif self.cursor_x >= self.scroll_x + width:
            self.scroll_x = self.cursor_x - width + 1
        self.scroll_y = max(0, self.scroll_y)
        self.scroll_x = max(0, self.scroll_x)

    # -----------------------------------------------------------------
    # EDITING
    # -----------------------------------------------------------------
    def insert(self, text: str):
        for i, chunk in enumerate(text.split("\n")):
            if i:
                self.newline()
            if chunk:
                line = self.lines[self.cursor_y]
                self.lines[self.cursor_y] = line[:self.cursor_x] + chunk + line[self.cursor_x:]
                self.cursor_x += len(chunk)
                self.dirty = True
        self.preferred_x = self.cursor_x

    def newline(self):
        line = self.lines[self.cursor_y]
        self.lines[self.cursor_y] = line[:self.cursor_x]
        self.lines.insert(self.cursor_y + 1, line[self.cursor_x:])
        self.cursor_y += 1
        self.cursor_x = 0
        self.preferred_x = 0
        self.dirty = True

    def backspace(self):
        if self.cursor_x > 0:
            line = self.lines[self.cursor_y]
            self.lines[self.cursor_y] = line[:self.cursor_x - 1] + line[self.cursor_x:]
            self.cursor_x -= 1
        elif self.cursor_y > 0:
            prev_line = self.lines[self.cursor_y - 1]
            self.lines[self.cursor_y - 1] = prev_line + self.lines.pop(self.cursor_y)
            self.cursor_y -= 1
            self.cursor_x = len(prev_line)
        else:
            return
        self.preferred_x = self.cursor_x
        self.dirty = True

    def delete_forward(self):
        line = self.lines[self.cursor_y]
        if self.cursor_x < len(line):
            self.lines[self.cursor_y] = line[:self.cursor_x] + line[self.cursor_x + 1:]
        elif self.cursor_y < len(self.lines) - 1:
            self.lines[self.cursor_y] = line + self.lines.pop(self.cursor_y + 1)
        else:
            return
        self.dirty = True

    # -----------------------------------------------------------------
    # MOVEMENT
    # -----------------------------------------------------------------
    def move_vertical(self, delta: int):
        self.cursor_y = max(0, min(self.cursor_y + delta, len(self.lines) - 1))
        self.cursor_x = min(self.preferred_x, len(self.lines[self.cursor_y]))

    def move_left(self):
        if self.cursor_x > 0:
            self.cursor_x -= 1
        elif self.cursor_y > 0:
            self.cursor_y -= 1
            self.cursor_x = len(self.lines[self.cursor_y])
        self.preferred_x = self.cursor_x

    def move_right(self):
        if self.cursor_x < len(self.lines[self.cursor_y]):
            self.cursor_x += 1
        elif self.cursor_y < len(self.lines) - 1:
            self.cursor_y += 1
            self.cursor_x = 0
        self.preferred_x = self.cursor_x

    def home(self):
        self.cursor_x = 0
        self.preferred_x = 0

    def end(self):
        self.cursor_x = len(self.lines[self.cursor_y])
        self.preferred_x = self.cursor_x
