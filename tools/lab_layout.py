import cv2
import sys
import os
import time
import numpy as np

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from handcloud.config import CONFIG
from handcloud.control.controller import VisualEngine
from handcloud.core.types import HandLandmarkFrame, RawHand
from handcloud.hand_utils import synthetic_hand
from handcloud.ui.hud import OpenCvRenderer


def run_lab():
    print("🌀 LAYOUT LAB (Layer 3)")
    print("   -> Toggle simulated hands and watch the layout crossfade.")
    print("   -> 'DROPOUT' drops the left hand for one tick every second.")

    panel = "Layout Lab"
    cv2.namedWindow(panel, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(panel, 400, 260)

    def nothing(x): pass

    cv2.createTrackbar("LEFT HAND", panel, 1, 1, nothing)
    cv2.createTrackbar("RIGHT HAND", panel, 0, 1, nothing)
    cv2.createTrackbar("PINCH (%)", panel, 100, 100, nothing)
    cv2.createTrackbar("DEPTH (x100)", panel, 0, 20, nothing)
    cv2.createTrackbar("RATE (x10)", panel, int(CONFIG["LAYOUT_LERP_RATE"] * 10), 100, nothing)
    cv2.createTrackbar("DROPOUT", panel, 0, 1, nothing)

    renderer = OpenCvRenderer("Layout Lab Render")
    engine = VisualEngine(renderer)
    last_drop = time.perf_counter()

    while True:
        # Live Updates
        engine.layout.rate = max(0.1, cv2.getTrackbarPos("RATE (x10)", panel) / 10.0)
        pinch = cv2.getTrackbarPos("PINCH (%)", panel) / 100.0
        depth = -cv2.getTrackbarPos("DEPTH (x100)", panel) / 100.0

        hands = []
        now = time.perf_counter()
        drop = cv2.getTrackbarPos("DROPOUT", panel) and now - last_drop > 1.0
        if drop:
            last_drop = now
        if cv2.getTrackbarPos("LEFT HAND", panel) and not drop:
            hands.append(RawHand(synthetic_hand(0.3, pinch, depth, pinch_extent=CONFIG["PINCH_MAX_EXTENT"]), "Left"))
        if cv2.getTrackbarPos("RIGHT HAND", panel):
            hands.append(RawHand(synthetic_hand(0.7, pinch, depth, pinch_extent=CONFIG["PINCH_MAX_EXTENT"]), "Right"))

        engine.on_landmarks(HandLandmarkFrame(hands, now))
        out = engine.tick(now)

        current = engine.layout.current
        info = np.zeros((120, 400, 3), np.uint8)
        cv2.putText(info, f"MODE: {out.layout.value}", (10, 25), 1, 1.3, (0, 255, 0), 2)
        for row, (role, p) in enumerate(current.items()):
            txt = f"{role.value:5s} x={p.x_offset:+.2f} a={p.opacity:.2f} s={p.radius_scale:.2f} w={p.wave_amount:.2f}"
            cv2.putText(info, txt, (10, 60 + row * 25), 1, 1, (255, 255, 255), 1)
        cv2.imshow(panel, info)

        k = cv2.waitKey(1)
        if k == 27: break
        if k == ord('s'):
            print("\n" + "=" * 40)
            print("💾 CONFIG VALUES (LAYOUT):")
            print(f'    "LAYOUT_LERP_RATE": {engine.layout.rate:.1f},')
            print("=" * 40 + "\n")

    engine.close()
    cv2.destroyAllWindows()


if __name__ == "__main__":
    run_lab()
