import re


class AssistError(RuntimeError):
    pass


def strip_code_fence(txt: str) -> str:
    """Models like to wrap plain text in ```...``` despite being told not to."""
    m = re.search(r"```[\w-]*\s*\n(.*?)\n?```", txt or "", flags=re.S)
    return m.group(1) if m else (txt or "")


def gemini_text(model, prompt: str) -> str:
    if model is None:
        raise AssistError("模型尚未初始化，请先填写 API Key")
    resp = model.generate_content(prompt)
    return strip_code_fence(resp.text or "").strip()
