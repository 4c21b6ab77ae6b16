#!/usr/bin/env python3
"""
Localized UI and tutor strings (English and Simplified Chinese).
"""

BOT_NAME = 'VibeBot'

STRINGS = {
    'initial_greeting': {
        'en': "Hi, I'm {bot}! Welcome to {title}.",
        'zh': "你好，我是 {bot}！欢迎来到 {title}。",
    },
    'first_task': {'en': "Your first task:", 'zh': "你的第一个任务："},
    'next_step': {'en': "Next step:", 'zh': "下一步："},
    'execution_success': {'en': "Awesome, it works", 'zh': "太棒了，运行成功"},
    'all_steps_done': {
        'en': "You finished every step of this mission! Type 'finish' to collect your stars. ⭐",
        'zh': "你完成了这个任务的所有步骤！输入 'finish' 领取你的星星。⭐",
    },
    'error_detected': {
        'en': "Hmm, something went wrong in the code. Let's look at it together and try again! 🔧",
        'zh': "嗯，代码出了点问题。我们一起看看，再试一次吧！🔧",
    },
    'tutor_unavailable': {
        'en': "Oh no! My communication circuits are jammed. Can you try saying that again? 🤖",
        'zh': "糟糕！我的通讯线路堵塞了。你能再说一遍吗？🤖",
    },
    'execution_error': {
        'en': "Runtime Error: Connection to interpreter lost.",
        'zh': "运行错误：与解释器的连接已断开。",
    },
    'console_waiting': {'en': "Waiting for code...", 'zh': "等待代码..."},
    'running': {'en': "Running...", 'zh': "运行中..."},
    'os_not_loaded': {'en': "OS not loaded", 'zh': "系统未加载"},
    'screen_updated': {'en': "Screen updated!", 'zh': "屏幕已更新！"},
    'hint': {'en': "Hint", 'zh': "提示"},
    'step': {'en': "Step", 'zh': "步骤"},
    'focus_input': {
        'en': "Tell {bot} what you want the code to do",
        'zh': "告诉 {bot} 你想让代码做什么",
    },
    'focus_run': {'en': "Code is ready! Type 'run' to try it", 'zh': "代码准备好了！输入 'run' 运行"},
    'focus_finish': {'en': "Mission complete! Type 'finish'", 'zh': "任务完成！输入 'finish'"},
    'mission_accomplished': {'en': "Mission accomplished!", 'zh': "任务完成！"},
    'level_locked': {
        'en': "Level {level} is locked. Finish level {previous} first.",
        'zh': "第 {level} 关还没解锁。请先完成第 {previous} 关。",
    },
}


def t(key: str, lang: str, **kwargs) -> str:
    """Look up a string, falling back to English and then to the key itself"""
    entry = STRINGS.get(key, {})
    text = entry.get(lang, entry.get('en', key))
    if kwargs:
        return text.format(**kwargs)
    return text
