import logging

from vn_core.channel import TextChannel
from vn_core.data_models import Script
from vn_core.gemini_helpers import AssistError, gemini_text
from vn_core.prompt_builders import build_generate_prompt, build_rewrite_prompt
from vn_core.serializer import script_to_text

logger = logging.getLogger(__name__)


def generate_script_text(model, user_prompt: str, script: Script, channel: TextChannel) -> str:
    """Ask the model for a continuation and append it to the editor buffer."""
    if not (user_prompt or "").strip():
        raise AssistError("请输入故事提示")
    prompt = build_generate_prompt(user_prompt, [c.name for c in script.characters])
    result = gemini_text(model, prompt)
    if not result:
        raise AssistError("模型没有返回内容")
    logger.info("Generated %d chars for script id=%s", len(result), script.id)
    channel.append("\n\n" + result)
    return result


def rewrite_script_text(model, script: Script, channel: TextChannel, instruction: str = "") -> str:
    """Polish the whole script and replace the editor buffer with the result."""
    prompt = build_rewrite_prompt(script_to_text(script), instruction)
    result = gemini_text(model, prompt)
    if not result:
        raise AssistError("模型没有返回内容")
    logger.info("Rewrote script id=%s (%d chars)", script.id, len(result))
    channel.replace(result)
    return result
