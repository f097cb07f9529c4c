# -*- coding: utf-8 -*-
from typing import Iterable

SYNTAX_RULES = """
语法规则：
- # 场景名      → 切换场景
- 角色名：台词  → 对话（角色名与台词用中文冒号分隔）
- 旁白内容      → 无角色名的独白/旁白
- ? 提示语      → 选项节点
- > 选项文字    → 选项内容（紧跟在 ? 行之后）
- END 结局      → 结局节点
- // 注释
""".strip()


def _character_list(names: Iterable[str]) -> str:
    return "、".join(n for n in names if n) or "（无）"


def build_generate_prompt(user_prompt: str, character_names: Iterable[str]) -> str:
    """
    续写剧情：返回符合剧本语法的纯文本，由编辑器追加到末尾。
    """
    return f"""
你是视觉小说剧本创作助手。根据用户的提示，生成一段符合以下语法格式的剧本文本。

{SYNTAX_RULES}

要求：
- 只输出剧本文本，不加任何说明
- 生成 5-15 行
- 角色名保持一致，不超过 6 字
- 如有分支，选项后另起一个场景继续

现有角色：{_character_list(character_names)}

{user_prompt.strip()}
""".strip()


def build_rewrite_prompt(current_text: str, instruction: str = "") -> str:
    """
    润色/扩写：返回完整剧本文本，由编辑器整体替换。
    """
    extra = f"\n\n额外要求：{instruction.strip()}" if instruction and instruction.strip() else ""
    return f"""
你是视觉小说剧本润色师。用户会给你一段剧本草稿，请在保持原有剧情走向和语法格式不变的前提下：
- 使台词更生动、有情感
- 补充场景细节描写（旁白）
- 保持所有角色名、场景名、选项结构不变
- 只输出修改后的完整剧本文本，不加说明

{SYNTAX_RULES}

请润色以下剧本{extra}

---
{current_text}
""".strip()
