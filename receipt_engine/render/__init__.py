from .escpos import EscPosGenerator, Command, generate
from .markup import render_preview, render_element
