from __future__ import annotations
import argparse, datetime, json
from neuro_core.capture import (
    ChoiceCapture, ContinueCapture, DateCapture, TextCapture, TimedTextCapture,
)
from neuro_core.config import DOMAINS
from neuro_core.engine import AssessmentEngine
from neuro_core.errors import ValidationError
def ask(prompt: str, options=None) -> str:
    if options:
        print(prompt)
        for i,opt in enumerate(options): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index): ").strip()
            if v.isdigit() and int(v) < len(options): return options[int(v)]
            print("Enter a number index.")
    else:
        return input(prompt + " ").strip()
def capture_for(item):
    prompt = str(item.payload.get("prompt") or item.id)
    if item.kind == "continue":
        input(prompt + "  [press Enter to continue]"); return ContinueCapture()
    if item.kind == "radio":
        return ChoiceCapture(value=ask(prompt, [str(o) for o in item.payload.get("options") or []]))
    if item.kind == "date":
        raw = ask(prompt + " (YYYY-MM-DD)")
        try: return DateCapture(value=datetime.date.fromisoformat(raw))
        except ValueError: return TextCapture(text=raw)  # rejected by validation, asked again
    if item.kind == "timed_text":
        return TimedTextCapture(entries=tuple(x.strip() for x in ask(prompt + " (comma separated)").split(",")))
    if item.kind == "text":
        return TextCapture(text=ask(prompt))
    return None
def main():
    ap = argparse.ArgumentParser(description="Terminal questionnaire for the text-based batteries.")
    ap.add_argument("--domain", choices=list(DOMAINS), default="behavioral")
    a = ap.parse_args()
    print(f"Neuro screen - {a.domain}")
    session = AssessmentEngine().start_session(a.domain)
    while not session.finished:
        item = session.current_item()
        cap = capture_for(item)
        if cap is None:
            if item.optional: session.skip()
            else: session.fail("sensor capture not available in the terminal", item_id=item.id)
            continue
        try:
            session.submit(cap, item_id=item.id)
        except ValidationError as e:
            for msg in e.messages: print(f"  ! {msg}")
    res = session.result
    print(json.dumps({"score": res.score, "risk_level": res.risk_level,
                      "recommendations": res.recommendations}, indent=2))
if __name__ == "__main__": main()
