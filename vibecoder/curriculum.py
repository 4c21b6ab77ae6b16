#!/usr/bin/env python3
"""
Static curriculum: worlds, levels and their steps.

Five worlds of ten levels each. A handful of levels are hand-written; the
remaining slots are filled with a generic three-step training mission.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


LEVELS_PER_WORLD = 10
WORLD_COUNT = 5


@dataclass(frozen=True)
class World:
    id: int
    title: str
    description: str
    theme_color: str


@dataclass(frozen=True)
class Step:
    """One curriculum step"""
    id: int
    instruction: str       # What the tutor wants the kid to do
    hint: str              # Hint for the prompt
    expected_action: str   # Internal key for the visual update
    reference_code: str    # What the code "would" look like; a judging hint only


@dataclass(frozen=True)
class Level:
    id: int
    world_id: int
    title: str
    description: str
    steps: Tuple[Step, ...]
    max_stars: int = 3

    @property
    def step_count(self) -> int:
        return len(self.steps)


WORLDS = {
    'en': [
        World(1, "Novice Station", "Learn the basics of Python and Pygame.", 'indigo'),
        World(2, "Artist Alley", "Master shapes, colors, and drawing.", 'pink'),
        World(3, "Mover's Gym", "Understand coordinates and movement.", 'blue'),
        World(4, "Logic Lab", "Use if-statements and collision detection.", 'purple'),
        World(5, "Game Arena", "Build full interactive loops.", 'orange'),
    ],
    'zh': [
        World(1, "新手空间站", "学习 Python 和 Pygame 的基础知识。", 'indigo'),
        World(2, "艺术家画廊", "掌握形状、颜色和绘图。", 'pink'),
        World(3, "运动健身房", "理解坐标和移动。", 'blue'),
        World(4, "逻辑实验室", "使用 if 语句和碰撞检测。", 'purple'),
        World(5, "游戏竞技场", "构建完整的交互循环。", 'orange'),
    ],
}


_BASE_LEVELS = {
    'en': [
        Level(1, 1, "Mission: Hello Space", "Learn how to wake up your computer using Python!", (
            Step(1, "Let's start our game engine. Tell me to 'import the pygame library'.",
                 "Try typing: 'Import pygame for me'", 'IMPORT_PYGAME',
                 "# Import the Pygame library\nimport pygame\nimport sys\n\n"
                 "# Initialize the game engine\npygame.init()"),
            Step(2, "Now we need a window to see the stars. Ask me to 'create a screen'.",
                 "Say: 'Create a game screen size 800 by 600'", 'CREATE_SCREEN',
                 "# Set up the game window (Width=800, Height=600)\n"
                 "screen = pygame.display.set_mode((800, 600))\n"
                 "# Give the window a title\npygame.display.set_caption('My First Space Game')"),
            Step(3, "Space is dark! Tell me to 'fill the background with black color'.",
                 "Type: 'Fill the screen with black'", 'FILL_BLACK',
                 "# Fill the screen with Black color (Red=0, Green=0, Blue=0)\n"
                 "screen.fill((0, 0, 0))\n# Refresh the display to show the color\n"
                 "pygame.display.flip()"),
        )),
        Level(2, 1, "Mission: The Red Alert", "Change the background color to signal an alert.", (
            Step(1, "Start the engine again. Import pygame.", "Import pygame", 'IMPORT_PYGAME',
                 "# Import Pygame\nimport pygame\n# Initialize the system\npygame.init()"),
            Step(2, "Create the screen again.", "Create screen 800x600", 'CREATE_SCREEN',
                 "# Create the game window\nscreen = pygame.display.set_mode((800, 600))"),
            Step(3, "Fill the screen with Red for emergency!", "Fill screen red (255, 0, 0)", 'FILL_RED',
                 "# Fill background with Red (Red=255, Green=0, Blue=0)\n"
                 "screen.fill((255, 0, 0))\n# Update the screen\npygame.display.flip()"),
        )),
        Level(11, 2, "Mission: Draw the Hero", "Create your main character using shapes and variables.", (
            Step(1, "We need a hero color. Define a variable called 'hero_color' that is blue.",
                 "Say: 'Create a variable named hero_color for blue'", 'DEFINE_COLOR',
                 "# Define the color Blue using RGB values\nhero_color = (0, 0, 255)"),
            Step(2, "Let's draw our hero! Ask me to 'draw a circle' using our hero color.",
                 "Type: 'Draw a circle in the middle using hero_color'", 'DRAW_HERO',
                 "# Draw a circle on the screen\n"
                 "# Arguments: Surface, Color, Position (x,y), Radius\n"
                 "pygame.draw.circle(screen, hero_color, (400, 300), 30)"),
            Step(3, "Let's make it glow. Ask me to update the display.",
                 "Say: 'Update the display to show changes'", 'UPDATE_DISPLAY',
                 "# Update the display to show what we drew\npygame.display.flip()"),
        )),
        Level(21, 3, "Mission: First Steps", "Move the hero to a new position.", (
            Step(1, "Define starting coordinates x and y.", "x = 100, y = 100", 'DEFINE_VARS',
                 "# Set initial position variables\nx = 100\ny = 100"),
            Step(2, "Change x to move right. Add 50 to x.", "x = x + 50", 'MOVE_RIGHT',
                 "# Increase x to move right\nx += 50"),
            Step(3, "Draw the hero at the new x, y.", "Draw circle at (x, y)", 'DRAW_HERO_MOVED',
                 "# Draw the hero at the new position (x, y)\n"
                 "pygame.draw.circle(screen, (0,0,255), (x, y), 30)\n# Refresh display\n"
                 "pygame.display.flip()"),
        )),
    ],
    'zh': [
        Level(1, 1, "任务：你好，太空", "学习如何用 Python 唤醒你的电脑！", (
            Step(1, "让我们启动游戏引擎。告诉我 '导入 pygame 库'。",
                 "试着输入：'帮我导入 pygame'", 'IMPORT_PYGAME',
                 "# 导入 pygame 库\nimport pygame\nimport sys\n\n# 初始化游戏引擎\npygame.init()"),
            Step(2, "现在我们需要一个窗口来看星星。让我 '创建一个屏幕'。",
                 "说：'创建一个 800 x 600 的游戏屏幕'", 'CREATE_SCREEN',
                 "# 创建一个 800x600 的窗口\nscreen = pygame.display.set_mode((800, 600))\n"
                 "# 设置窗口标题\npygame.display.set_caption('我的第一个太空游戏')"),
            Step(3, "太空是黑暗的！告诉我 '用黑色填充背景'。",
                 "输入：'把屏幕填充为黑色'", 'FILL_BLACK',
                 "# 用黑色填充背景 (红=0, 绿=0, 蓝=0)\nscreen.fill((0, 0, 0))\n"
                 "# 更新显示以查看颜色\npygame.display.flip()"),
        )),
        Level(2, 1, "任务：红色警报", "将背景颜色更改为红色以发出警报信号。", (
            Step(1, "再次启动引擎。导入 pygame。", "导入 pygame", 'IMPORT_PYGAME',
                 "# 导入 Pygame\nimport pygame\n# 初始化系统\npygame.init()"),
            Step(2, "再次创建屏幕。", "创建 800x600 的屏幕", 'CREATE_SCREEN',
                 "# 创建游戏窗口\nscreen = pygame.display.set_mode((800, 600))"),
            Step(3, "用红色填充屏幕以表示紧急情况！", "填充红色 (255, 0, 0)", 'FILL_RED',
                 "# 用红色填充背景 (红=255, 绿=0, 蓝=0)\nscreen.fill((255, 0, 0))\n"
                 "# 更新屏幕\npygame.display.flip()"),
        )),
        Level(11, 2, "任务：绘制英雄", "使用形状和变量创建你的主角。", (
            Step(1, "我们需要定义英雄的颜色。定义一个变量叫 'hero_color'，它是蓝色的。",
                 "说：'创建一个名为 hero_color 的变量，颜色为蓝色'", 'DEFINE_COLOR',
                 "# 定义蓝色的 RGB 颜色变量\nhero_color = (0, 0, 255)"),
            Step(2, "来画我们的英雄吧！让我用英雄颜色 '画一个圆'。",
                 "输入：'用 hero_color 在中间画一个圆'", 'DRAW_HERO',
                 "# 在屏幕上画一个圆\n# 参数：画布、颜色、位置 (x,y)、半径\n"
                 "pygame.draw.circle(screen, hero_color, (400, 300), 30)"),
            Step(3, "让它发光吧。让我更新显示。",
                 "说：'更新显示以查看变化'", 'UPDATE_DISPLAY',
                 "# 更新显示，看看我们画了什么\npygame.display.flip()"),
        )),
        Level(21, 3, "任务：第一步", "把英雄移动到新的位置。", (
            Step(1, "定义起始坐标 x 和 y。", "x = 100, y = 100", 'DEFINE_VARS',
                 "# 设置初始位置变量\nx = 100\ny = 100"),
            Step(2, "改变 x 让英雄向右移动。给 x 加 50。", "x = x + 50", 'MOVE_RIGHT',
                 "# 增加 x 向右移动\nx += 50"),
            Step(3, "在新位置 x, y 绘制英雄。", "在 (x, y) 画圆", 'DRAW_HERO_MOVED',
                 "# 在新位置 (x, y) 绘制英雄\npygame.draw.circle(screen, (0,0,255), (x, y), 30)\n"
                 "# 刷新显示\npygame.display.flip()"),
        )),
    ],
}


def _generic_level(level_id: int, world_id: int, lang: str) -> Level:
    """Filler mission used for every slot without hand-written content"""
    if lang == 'zh':
        return Level(level_id, world_id, f"训练任务 {level_id}", "巩固你的编程技能。", (
            Step(1, "让我们设置环境。导入 pygame。", "import pygame", 'IMPORT_PYGAME',
                 "# 导入 Pygame 游戏库\nimport pygame\n# 启动游戏引擎\npygame.init()"),
            Step(2, "创建一个窗口。", "screen = ...", 'CREATE_SCREEN',
                 "# 设置屏幕大小为 800x600\nscreen = pygame.display.set_mode((800, 600))"),
            Step(3, "更新显示。", "display.flip()", 'UPDATE_DISPLAY',
                 "# 更新屏幕显示以查看更改\npygame.display.flip()"),
        ))
    return Level(level_id, world_id, f"Training Mission {level_id}", "Reinforce your coding skills.", (
        Step(1, "Let's set up. Import pygame.", "import pygame", 'IMPORT_PYGAME',
             "# Import the Pygame library\nimport pygame\n# Initialize the game engine\npygame.init()"),
        Step(2, "Create a window.", "screen = ...", 'CREATE_SCREEN',
             "# Set screen size to 800x600\nscreen = pygame.display.set_mode((800, 600))"),
        Step(3, "Update the display.", "display.flip()", 'UPDATE_DISPLAY',
             "# Update the display to show changes\npygame.display.flip()"),
    ))


_LEVEL_CACHE: Dict[str, List[Level]] = {}


def get_levels(lang: str = 'en') -> List[Level]:
    """All levels for a language, sorted by id"""
    lang = lang if lang in _BASE_LEVELS else 'en'
    if lang not in _LEVEL_CACHE:
        levels = {level.id: level for level in _BASE_LEVELS[lang]}
        for world_id in range(1, WORLD_COUNT + 1):
            for i in range(1, LEVELS_PER_WORLD + 1):
                level_id = (world_id - 1) * LEVELS_PER_WORLD + i
                if level_id not in levels:
                    levels[level_id] = _generic_level(level_id, world_id, lang)
        _LEVEL_CACHE[lang] = sorted(levels.values(), key=lambda level: level.id)
    return list(_LEVEL_CACHE[lang])


def get_worlds(lang: str = 'en') -> List[World]:
    return list(WORLDS.get(lang, WORLDS['en']))


def get_level(level_id: int, lang: str = 'en') -> Optional[Level]:
    for level in get_levels(lang):
        if level.id == level_id:
            return level
    return None
