from __future__ import annotations

import logging
import threading
from typing import Optional

from prompt3d.llm.base import Generator, ImagePart

logger = logging.getLogger(__name__)


class LocalGenerator(Generator):
    """
    Local Hugging Face causal LM, optionally with a LoRA adapter.

    Heavy libraries are imported and weights loaded on first use, unless
    `load()` is called up front (the API does so at startup).
    Text-only: a request carrying an image fails so the chain moves on.

    The `timeout` given to `generate` becomes `max_time`, which is checked
    between generated tokens: it bounds decoding, not loading or prefill.
    """

    def __init__(
        self,
        model_id: str,
        adapter_path: str = "",
        *,
        max_new_tokens: int = 1024,
    ):
        self.name = f"local:{model_id}"
        self.model_id = model_id
        self.adapter_path = adapter_path
        self.max_new_tokens = max_new_tokens
        self._tokenizer = None
        self._model = None
        self._lock = threading.Lock()

    def load(self):
        with self._lock:
            if self._model is not None:
                return

            import torch
            from transformers import AutoTokenizer, AutoModelForCausalLM

            logger.info("Loading local model %s", self.model_id)
            self._tokenizer = AutoTokenizer.from_pretrained(self.model_id)
            model = AutoModelForCausalLM.from_pretrained(
                self.model_id,
                torch_dtype=torch.float32,
                device_map="cpu",
            )

            if self.adapter_path:
                from peft import PeftModel

                logger.info("Applying LoRA adapter %s", self.adapter_path)
                model = PeftModel.from_pretrained(model, self.adapter_path)

            model.eval()
            self._model = model

    def generate(
        self,
        prompt: str,
        image: Optional[ImagePart] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        if image is not None:
            raise RuntimeError(f"{self.name} does not accept reference images")

        import torch

        self.load()

        messages = [{"role": "user", "content": prompt}]
        chat = self._tokenizer.apply_chat_template(
            messages,
            tokenize=False,
            add_generation_prompt=True,
        )
        inputs = self._tokenizer(chat, return_tensors="pt")

        with torch.no_grad():
            output = self._model.generate(
                **inputs,
                max_new_tokens=self.max_new_tokens,
                do_sample=False,
                max_time=timeout,
            )

        # drop the echoed prompt tokens
        new_tokens = output[0][inputs["input_ids"].shape[1]:]
        return self._tokenizer.decode(new_tokens, skip_special_tokens=True)
