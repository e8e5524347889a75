"""
LLM Chess Live package.

Components:
- supervisor: background orchestrator that restarts games forever and survives faults
- session: one game from start position to checkmate/stalemate/draw/abnormal end
- turn_sequencer/move_extractor/move_applier: agent turn, move extraction, random fallback
- outcome/referee: terminal-state classification over python-chess
- state: atomic snapshot store read by viewers (game state, tallies, viewer count)
- llm_agent/random_agent/llm_client: agents behind an OpenAI-compatible gateway
- server: thin Flask API over the snapshot store
"""
# Package exports are intentionally minimal; import modules directly as needed.
