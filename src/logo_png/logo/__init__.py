"""Logo domain — description model and PNG rendering.

Learn: Rendering is a pure function of (description, options). The live
layer calls it once per confirmed change; the HTTP layer calls it per request.
"""
