"""Live update distribution — poll the upstream API, push changes to viewers.

Learn: Frames flow one way:
1. UpdateLoop → SourceFetcher (HTTP GET) → ChangeDetectingCache
2. On change: render → Broadcaster → every subscriber Outbox → websocket
3. Then the same PNG goes to the history store

Viewers that miss a frame never get it again; a reconnecting viewer
waits for the next change.
"""
