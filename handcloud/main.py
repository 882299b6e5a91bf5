"""
HandCloud - Main Entry Point.
=============================

This module serves as the bootloader for the HandCloud visualizer.
It wires the "Layer Cake" together:
1. Initializing the Perception Layer (Camera Thread + MediaPipe Hands).
2. Spawning the Visual Engine (roles, layout, point clouds).
3. Rendering the Feedback Loop (OpenCV window).

Usage:
    $ python -m handcloud.main
    Keys: ESC exit | P pause/resume | R reset depth baseline | V toggle webcam inset
"""
import logging
import platform
import sys
import threading
import time
from typing import Mapping, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np

from handcloud.config import CONFIG
from handcloud.control.controller import VisualEngine
from handcloud.core.types import DetectorInitError, HandLandmarkFrame, RawHand
from handcloud.ui.hud import OpenCvRenderer

logger = logging.getLogger(__name__)


class ThreadedCamera:
    """
    High-Performance Camera Reader.

    cv2.VideoCapture.read() is blocking. Running the capture on a daemon
    thread keeps the render loop at display rate and always hands it the
    freshest frame.
    """
    def __init__(self, src: int = 0, config: Mapping = CONFIG):
        backend = cv2.CAP_DSHOW if platform.system() == "Windows" else cv2.CAP_ANY
        self.cap = cv2.VideoCapture(src, backend)
        if not self.cap.isOpened():
            self.cap.release()
            raise DetectorInitError(f"Camera {src} could not be opened")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, config["CAMERA_WIDTH"])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config["CAMERA_HEIGHT"])
        self.cap.set(cv2.CAP_PROP_FPS, config["TARGET_FPS"])

        self.ret, self.frame = self.cap.read()
        if not self.ret:
            self.cap.release()
            raise DetectorInitError(f"Camera {src} returned no frames")

        self.running = True
        self.lock = threading.Lock()
        self.thread = threading.Thread(target=self._reader, daemon=True)
        self.thread.start()

    def _reader(self):
        """Background thread loop for frame grabbing."""
        while self.running:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("Camera stream ended")
                self.running = False
                break
            # Lock ensures we don't read a half-written frame
            with self.lock:
                self.ret, self.frame = ret, frame

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Returns the most recent frame. Non-blocking."""
        with self.lock:
            return self.ret, self.frame.copy() if self.frame is not None else None

    def release(self, timeout: float = 1.0):
        """Stops the reader before the capture goes away (read() must not race release())."""
        self.running = False
        if self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout)
        self.cap.release()


class MediaPipeHandSource:
    """Adapter: MediaPipe Hands results -> HandLandmarkFrame."""

    def __init__(self, config: Mapping = CONFIG):
        try:
            self.hands = mp.solutions.hands.Hands(
                max_num_hands=config["MAX_HANDS"],
                model_complexity=config["MODEL_COMPLEXITY"],
                min_detection_confidence=config["MIN_DETECTION_CONFIDENCE"],
                min_tracking_confidence=config["MIN_TRACKING_CONFIDENCE"],
            )
        except (AttributeError, RuntimeError, OSError) as exc:
            raise DetectorInitError(f"MediaPipe Hands failed to start: {exc}") from exc

    def detect(self, frame_rgb: np.ndarray, timestamp: float) -> HandLandmarkFrame:
        results = self.hands.process(frame_rgb)
        hands = []
        if results.multi_hand_landmarks:
            # Landmark lists stay MediaPipe objects: the assigner converts, the HUD draws them as-is
            for lms, handed in zip(results.multi_hand_landmarks, results.multi_handedness):
                hands.append(RawHand(lms, handed.classification[0].label))
        return HandLandmarkFrame(hands, timestamp)

    def close(self):
        self.hands.close()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    # 1. Boot Sequence
    print("🚀 HANDCLOUD: ONLINE")
    print("   -> Press 'ESC' to Exit")
    print("   -> Press 'P' to Pause / Resume")
    print("   -> Press 'R' to Reset Depth Baseline")
    print("   -> Press 'V' to Toggle Webcam Preview")

    # 2. Perception (fatal if it cannot start; restart is up to the user)
    try:
        cam = ThreadedCamera(CONFIG["CAMERA_INDEX"])
    except DetectorInitError as exc:
        print(f"❌ Failed to access camera: {exc}")
        print("   -> Please ensure camera permissions are granted and restart.")
        return 1
    try:
        source = MediaPipeHandSource()
    except DetectorInitError as exc:
        cam.release()
        print(f"❌ Failed to start hand tracking: {exc}")
        return 1

    # 3. Engine + Output
    renderer = OpenCvRenderer()
    engine = VisualEngine(renderer)

    try:
        while True:
            # --- PERCEPTION ---
            ret, frame = cam.read()
            if ret and frame is not None and not engine.paused:
                # Mirror for intuitive interaction
                if CONFIG["MIRROR_INPUT"]:
                    frame = cv2.flip(frame, 1)
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                hands = source.detect(rgb, time.perf_counter())
                engine.on_landmarks(hands)
                renderer.set_preview(frame, hands)

            # --- ENGINE + RENDER ---
            engine.tick(time.perf_counter())

            # Input Handling
            k = cv2.waitKey(1) & 0xFF
            if k == 27: break  # ESC
            elif k == ord('p'):
                if engine.paused: engine.resume()
                else: engine.pause()
            elif k == ord('r'):
                engine.assigner.reset_baseline()
                print("🎯 Depth baseline reset")
            elif k == ord('v'):
                renderer.toggle_preview()
    finally:
        # Graceful Shutdown
        cam.release()
        source.close()
        engine.close()
        cv2.destroyAllWindows()
        print("🔴 SYSTEM OFFLINE")
    return 0


if __name__ == "__main__":
    sys.exit(main())
