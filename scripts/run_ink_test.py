import os, sys
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
os.environ.setdefault('QT_QPA_PLATFORM','offscreen')
from shanshui.engine import LandscapeEngine

# Headless engine, no widget: feed a diagonal pointer sweep and a few clicks
engine = LandscapeEngine(seed=7)
engine.merge_state({'system': {'debugEvery': 0}})

w, h = 800, 600
ink_counts = []
ripple_counts = []
for frame in range(300):
    x = (frame * 5) % w
    y = h * 0.25 + (frame % 120)
    engine.pointer_move(x, y, w, h)
    if frame % 50 == 0:
        engine.pointer_click(x, y)
    engine.step(w, h, frame * 16.0)
    ink_counts.append(len(engine.ink))
    ripple_counts.append(len(engine.ripples))

print('Total frames:', len(ink_counts))
print('Dust population:', len(engine.dust))
print('Final ink count:', len(engine.ink))
print('Peak ink count:', max(ink_counts))
print('Ripple count progression sample (every 25th):', ripple_counts[::25])
print('Smoothed pointer:', round(engine.pointer.x, 2), round(engine.pointer.y, 2))
print('Sample ink entries:', engine.ink.particles[:3])
