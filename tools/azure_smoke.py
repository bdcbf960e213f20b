# tools/azure_smoke.py
"""Round-trip check of the Azure insight backend: raw chat, then a parsed recommendation list."""
from __future__ import annotations
import json
from openai import NotFoundError
from neuro_core.azure_cfg import settings
from neuro_core.insights import AzureInsightService
from neuro_core.recommendations import fallback_advice
from neuro_core.llm_bridge import chat_azure, extract_list

def main():
    s = settings()
    print(json.dumps(s.redacted(), indent=2))
    try:
        pong = chat_azure("Answer in one word.", "Say 'pong' only.", max_tokens=5, temperature=0.0)
    except NotFoundError:
        print(f"Deployment {s.deployment!r} not found for api_version {s.api_version}.")
        print("Check the deployment name and the Target URI version in the Azure portal.")
        raise
    print("chat ok:", pong.strip())
    raw = chat_azure("Return ONLY a JSON array of 3 short strings.", "Three tips for better sleep.")
    print("parsed :", extract_list(raw, limit=3))
    # the service swallows backend errors, so a fallback list here means the call failed
    recs = AzureInsightService().recommend(72, "cognitive", {})
    print("service:", recs, "(local fallback)" if recs == fallback_advice("cognitive") else "")

if __name__ == "__main__":
    main()
